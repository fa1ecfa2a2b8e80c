"""Dual-automaton runtime monitor.

A monitor for a formula φ keeps two trimmed automata: A for φ and A′ for ¬φ
(each conjoined with the constraint formula when one is given). It tracks
the set of states each automaton can be in after the observations seen so
far:

- A has no live state left: no continuation satisfies φ, verdict FALSE
- A′ has no live state left: every continuation satisfies φ, verdict TRUE
- otherwise: UNDECIDED

A transition labelled σ can be taken on an observation O iff the axioms of
σ together with O (and the global context) are satisfiable according to
the oracle.

Both sets empty at once means no interpretation fits the trace for φ or ¬φ.
That cannot happen with well-formed automata and is reported as
:class:`~ontomon.types.MonitorInvariantError`.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass

from ..automata.builder import AutomatonBuilder
from ..automata.labelled import LabelledAutomaton, Symbol
from ..logic.formula import TemporalFormula
from ..types import MonitorInvariantError, State
from .verdict import Verdict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonitorState:
    """Live state-sets of the formula automaton and of its negation.

    Attributes:
        formula_states: Live states of the automaton for φ.
        negation_states: Live states of the automaton for ¬φ.
    """

    formula_states: frozenset[State]
    negation_states: frozenset[State]

    def as_pair(self) -> tuple[frozenset[State], frozenset[State]]:
        """Return ``(formula_states, negation_states)``."""
        return self.formula_states, self.negation_states

    def verdict(self) -> Verdict:
        """Derive the verdict from the emptiness of the two sets.

        Raises:
            MonitorInvariantError: If both sets are empty.
        """
        if not self.formula_states and not self.negation_states:
            raise MonitorInvariantError("Both live state-sets are empty")
        if not self.formula_states:
            return Verdict.FALSE
        if not self.negation_states:
            return Verdict.TRUE
        return Verdict.UNDECIDED


def successor_states(
    automaton: LabelledAutomaton,
    states: Iterable[State],
    observation: frozenset[Hashable],
    formula: TemporalFormula,
    check_all: Callable[[Sequence[frozenset[Hashable]]], list[bool]],
) -> frozenset[State]:
    """Compute the states reachable from ``states`` on one observation.

    Each distinct outgoing symbol is checked once: its axioms (through the
    formula's translation map) joined with the observation.

    Args:
        automaton: The automaton to step.
        states: Current live states.
        observation: Axioms describing the current time point.
        formula: Formula the automaton was built from.
        check_all: Batch satisfiability check, answers in input order.

    Returns:
        The successor state-set.

    Raises:
        MalformedSymbolError: If a symbol has no translation.
    """
    outgoing: list[tuple[Symbol, frozenset[State]]] = []
    for state in sorted(states, key=repr):
        outgoing.extend(automaton.outgoing(state))

    symbols = sorted({symbol for symbol, _ in outgoing})
    answers = check_all([formula.axioms_for(symbol) | observation for symbol in symbols])
    enabled = {symbol for symbol, ok in zip(symbols, answers) if ok}

    result: set[State] = set()
    for symbol, targets in outgoing:
        if symbol in enabled:
            result.update(targets)
    return frozenset(result)


class Monitor:
    """Runtime monitor for a temporal formula over labelled axioms.

    Usage:
        monitor = Monitor(formula, AutomatonBuilder(compiler, oracle))
        for observation in trace:
            verdict = monitor.step(observation)
            if verdict.is_conclusive():
                break

    Once the verdict is TRUE or FALSE it is final: the empty side has no
    successors, so it stays empty while the other side keeps moving. If that
    side runs empty too, the step raises
    :class:`~ontomon.types.MonitorInvariantError`.
    """

    def __init__(
        self,
        formula: TemporalFormula,
        builder: AutomatonBuilder,
        global_context: Iterable[Hashable] | None = None,
        constraints: TemporalFormula | None = None,
    ):
        """Build both automata and enter the initial state.

        Args:
            formula: The property to monitor.
            builder: Builder providing compiler and oracle.
            global_context: Axioms holding at every time point.
            constraints: Formula assumed to hold on every trace.

        Raises:
            MonitorInvariantError: If neither automaton has an initial state left.
        """
        start = time.perf_counter()
        self.formula = formula
        self.constraints = constraints
        self.builder = builder
        self.global_context: frozenset[Hashable] = frozenset(global_context or ())

        positive = formula
        negative = formula.negation()
        if constraints is not None:
            positive = positive.conjunction(constraints)
            negative = negative.conjunction(constraints)
        self._formulas = (positive, negative)

        # Built one after the other; the builder's pool bounds the oracle calls
        automaton = builder.build(positive, self.global_context).trim()
        negation_automaton = builder.build(negative, self.global_context).trim()
        self._automata = (automaton, negation_automaton)

        self._state = MonitorState(automaton.initial_states, negation_automaton.initial_states)
        self._steps = 0
        self._warned_conclusive = False
        self._ensure_consistent(self._state, 0)

        logger.debug(
            "Monitor for %r ready: %d/%d states after trimming, verdict %s in %.3fs",
            formula.propositional_abstraction,
            automaton.num_states,
            negation_automaton.num_states,
            self._state.verdict(),
            time.perf_counter() - start,
        )

    def _ensure_consistent(self, state: MonitorState, steps: int) -> None:
        if not state.formula_states and not state.negation_states:
            raise MonitorInvariantError(
                f"No run of {self.formula.propositional_abstraction!r} or of its "
                "negation is consistent with the trace",
                steps=steps,
            )

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def state(self) -> MonitorState:
        """Current live state-sets."""
        return self._state

    @property
    def steps(self) -> int:
        """Number of observations processed."""
        return self._steps

    @property
    def automata(self) -> tuple[LabelledAutomaton, LabelledAutomaton]:
        """Trimmed automata for φ and ¬φ. Treat as read-only."""
        return self._automata

    @property
    def formulas(self) -> tuple[TemporalFormula, TemporalFormula]:
        """Formulas the two automata were built from (constraints included)."""
        return self._formulas

    def current_state_pair(self) -> tuple[frozenset[State], frozenset[State]]:
        """Return the live state-sets ``(S1, S2)``."""
        return self._state.as_pair()

    def verdict(self) -> Verdict:
        """Current verdict.

        Raises:
            MonitorInvariantError: If both live state-sets are empty.
        """
        return self._state.verdict()

    # -------------------------------------------------------------------------
    # Stepping
    # -------------------------------------------------------------------------

    def step(self, observation: Iterable[Hashable]) -> Verdict:
        """Read the observation for the next time point.

        Both successor sets are computed before either is committed. If an
        oracle call fails, or both sets would become empty, the monitor keeps
        its previous state.

        Args:
            observation: Axioms describing the time point.

        Returns:
            The verdict after the step.

        Raises:
            MonitorInvariantError: If both successor sets are empty.
            MalformedSymbolError: If a symbol has no translation.
        """
        current = self._state.verdict()
        if current.is_conclusive() and not self._warned_conclusive:
            logger.warning(
                "Monitor for %r is already %s; further observations cannot change it",
                self.formula.propositional_abstraction,
                current,
            )
            self._warned_conclusive = True

        axioms = frozenset(observation) | self.global_context
        (automaton, negation_automaton) = self._automata
        (positive, negative) = self._formulas

        next_state = MonitorState(
            successor_states(
                automaton, self._state.formula_states, axioms, positive, self.builder.check_all
            ),
            successor_states(
                negation_automaton,
                self._state.negation_states,
                axioms,
                negative,
                self.builder.check_all,
            ),
        )
        self._ensure_consistent(next_state, self._steps + 1)

        self._state = next_state
        self._steps += 1
        verdict = next_state.verdict()
        logger.debug(
            "Step %d: %d/%d live states, verdict %s",
            self._steps,
            len(next_state.formula_states),
            len(next_state.negation_states),
            verdict,
        )
        return verdict

    def run(self, observations: Iterable[Iterable[Hashable]]) -> Verdict:
        """Step through observations, stopping early on a conclusive verdict.

        Returns:
            The verdict after the last observation read.
        """
        verdict = self.verdict()
        for observation in observations:
            if verdict.is_conclusive():
                break
            verdict = self.step(observation)
        return verdict

    def __repr__(self) -> str:
        return (
            f"Monitor({self.formula.propositional_abstraction!r}, "
            f"steps={self._steps}, verdict={self._state.verdict()})"
        )


__all__ = [
    "MonitorState",
    "successor_states",
    "Monitor",
]

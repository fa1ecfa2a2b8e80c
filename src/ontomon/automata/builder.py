"""Oracle-filtered automaton construction.

This module provides:
- AutomatonBuilder: turns compiler output into a LabelledAutomaton, keeping
  only edges whose axioms the satisfiability oracle accepts
- Rigid-name product construction over (state, history) pairs
- Symbol completion over the free atoms of a translation map

Construction without rigid names:
    Every compiled edge is translated into axioms through the formula's
    translation map (plus the global context, if any). The edge is kept iff
    the oracle reports the axioms satisfiable.

Construction with rigid names:
    Kept edges are first completed: for every sign assignment to the atoms
    the edge does not mention, the completed symbol is checked again and
    added when satisfiable. The completed automaton is then unfolded into a
    product whose states pair an input state with the set of symbols
    read so far. An edge enters the product only if the oracle accepts the
    extended history as a sequence of time points in which non-rigid names
    are time-stamped and rigid names are shared. This is what keeps rigid
    names invariant across the whole run.

Oracle checks on independent edges may run on a thread pool
(``max_workers > 1``). The builder owns a single pool, created on first use
and shared by every build and monitor step, so at most ``max_workers`` oracle
calls run at once. Results are merged in input order, so the automaton is the
same as with sequential checking.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from collections.abc import Callable, Hashable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from ..logic.formula import TemporalFormula
from ..logic.oracle import SatisfiabilityOracle
from ..types import SIGMA, ExplorationError, Literal, State, atoms_of, is_negated, negate
from .compiler import CompiledEdge, LTLCompiler
from .labelled import LabelledAutomaton, Symbol

logger = logging.getLogger(__name__)

T = TypeVar("T")

History = frozenset[Symbol]
HistoryKey = tuple[tuple[Literal, ...], ...]


def history_key(history: Iterable[Symbol]) -> HistoryKey:
    """Canonical structural encoding of a history.

    Two histories with the same symbols map to the same key regardless of
    how or in which order they were built.
    """
    return tuple(sorted({symbol.literals for symbol in history}))


def complete_symbol(symbol: Symbol, alphabet: Iterable[str]) -> list[Symbol]:
    """Enumerate all completions of a symbol over an alphabet.

    The atoms of ``alphabet`` (keys of a translation map; negated keys and
    the wildcard are ignored) that ``symbol`` does not mention are assigned
    every combination of signs. The wildcard literal is dropped from the
    result.

    Args:
        symbol: The symbol to complete.
        alphabet: Translation map keys.

    Returns:
        One symbol per sign assignment (a single symbol when nothing is free).
    """
    free = sorted(atoms_of(key for key in alphabet if not is_negated(key)) - symbol.atoms)
    fixed = tuple(literal for literal in symbol if literal != SIGMA)
    completions = []
    for signs in itertools.product((True, False), repeat=len(free)):
        chosen = tuple(atom if positive else negate(atom) for atom, positive in zip(free, signs))
        completions.append(Symbol(fixed + chosen))
    return completions


class AutomatonBuilder:
    """Builds labelled automata for temporal formulas.

    Compiler and oracle errors propagate unchanged; the builder performs no
    retries.

    A builder with ``max_workers > 1`` holds a thread pool. Release it with
    :meth:`close` or by using the builder as a context manager:

        with AutomatonBuilder(compiler, oracle, max_workers=4) as builder:
            monitor = Monitor(formula, builder)
            monitor.run(trace)
    """

    def __init__(
        self,
        compiler: LTLCompiler,
        oracle: SatisfiabilityOracle,
        max_workers: int = 1,
        max_product_states: int = 100_000,
    ):
        """Initialize the builder.

        Args:
            compiler: LTL-to-automaton compiler
            oracle: Satisfiability oracle used to filter edges
            max_workers: Threads used for independent oracle checks (1 = sequential)
            max_product_states: Upper bound on (state, history) pairs explored
                by the rigid-name product

        Raises:
            ValueError: If a bound is not positive
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        if max_product_states < 1:
            raise ValueError(f"max_product_states must be >= 1, got {max_product_states}")
        self.compiler = compiler
        self.oracle = oracle
        self.max_workers = max_workers
        self.max_product_states = max_product_states
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Oracle fan-out
    # -------------------------------------------------------------------------

    def _pool(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix="ontomon-oracle"
                )
                logger.debug("Started oracle pool with %d workers", self.max_workers)
            return self._executor

    def _map(self, fn: Callable[[T], bool], items: Sequence[T]) -> list[bool]:
        if self.max_workers == 1 or len(items) < 2:
            return [fn(item) for item in items]
        return list(self._pool().map(fn, items))

    def close(self) -> None:
        """Shut down the oracle pool, if one was started.

        Safe to call more than once. A later check starts a new pool.
        """
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def __enter__(self) -> AutomatonBuilder:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def check_all(self, axiom_sets: Sequence[Iterable[Hashable]]) -> list[bool]:
        """Ask the oracle about each axiom set; answers are in input order."""
        return self._map(self.oracle.is_satisfiable, axiom_sets)

    def check_all_sequences(
        self,
        sequences: Sequence[Sequence[Iterable[Hashable]]],
        rigid_names: frozenset[str],
    ) -> list[bool]:
        """Ask the oracle about each time-indexed sequence; answers are in input order."""

        def check(sequence: Sequence[Iterable[Hashable]]) -> bool:
            return self.oracle.is_sequence_satisfiable(sequence, rigid_names)

        return self._map(check, sequences)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def build(
        self,
        formula: TemporalFormula,
        global_context: Iterable[Hashable] | None = None,
    ) -> LabelledAutomaton:
        """Build the automaton of a formula.

        Args:
            formula: The formula to compile.
            global_context: Axioms that hold at every time point.

        Returns:
            The (untrimmed) automaton.

        Raises:
            MalformedSymbolError: If an edge label has no translation.
            ExplorationError: If the rigid-name product exceeds its bound.
        """
        start = time.perf_counter()
        context = frozenset(global_context or ())
        edges: list[CompiledEdge] = list(self.compiler.compile(formula.propositional_abstraction))

        # Translate every label up front so a malformed one fails before any oracle call
        edge_axioms = [formula.axioms_for(edge.labels) | context for edge in edges]
        kept = [edge for edge, ok in zip(edges, self.check_all(edge_axioms)) if ok]

        automaton = LabelledAutomaton()
        if formula.rigid_names:
            completions = [
                (edge, symbol)
                for edge in kept
                for symbol in complete_symbol(Symbol(tuple(edge.labels)), formula.translation_map)
            ]
            completion_axioms = [formula.axioms_for(symbol) | context for _, symbol in completions]
            for (edge, symbol), ok in zip(completions, self.check_all(completion_axioms)):
                if ok:
                    automaton.add_transition(edge.source, symbol, edge.target)
        else:
            for edge in kept:
                automaton.add_transition(edge.source, Symbol(tuple(edge.labels)), edge.target)

        for edge in kept:
            if edge.source_initial:
                automaton.add_initial(edge.source)
            if edge.source_final:
                automaton.add_final(edge.source)
            if edge.target_initial:
                automaton.add_initial(edge.target)
            if edge.target_final:
                automaton.add_final(edge.target)

        logger.debug(
            "Built automaton for %r: %d/%d edges kept, %d states, %d transitions in %.3fs",
            formula.propositional_abstraction,
            len(kept),
            len(edges),
            automaton.num_states,
            automaton.num_transitions,
            time.perf_counter() - start,
        )

        if formula.rigid_names:
            automaton = self.respect_rigid_names(automaton, formula, context)
        return automaton

    def respect_rigid_names(
        self,
        automaton: LabelledAutomaton,
        formula: TemporalFormula,
        global_context: Iterable[Hashable] | None = None,
    ) -> LabelledAutomaton:
        """Unfold an automaton into its rigid-name respecting product.

        Product states are named ``"{state}-{n}"`` where ``n`` numbers the
        distinct histories (the empty history is 0). Exploration is
        depth-first from every initial state and memoises visited
        (state, history) pairs.

        Args:
            automaton: Automaton to unfold, normally with completed symbols.
            formula: Supplies the translation map and the rigid names.
            global_context: Axioms added to every time point.

        Returns:
            The product automaton.

        Raises:
            MalformedSymbolError: If a symbol has no translation.
            ExplorationError: If more than ``max_product_states`` pairs would
                be visited. Its ``explored`` count is then the bound itself.
        """
        start = time.perf_counter()
        context = frozenset(global_context or ())
        rigid = formula.rigid_names
        final = automaton.final_states

        history_ids: dict[HistoryKey, int] = {(): 0}

        def history_id(history: History) -> int:
            key = history_key(history)
            hid = history_ids.get(key)
            if hid is None:
                hid = len(history_ids)
                history_ids[key] = hid
            return hid

        def name(state: State, history: History) -> str:
            return f"{state}-{history_id(history)}"

        def time_points(history: History) -> list[frozenset[Hashable]]:
            return [formula.axioms_for(symbol) | context for symbol in sorted(history)]

        product = LabelledAutomaton()
        visited: set[tuple[State, int]] = set()
        stack: list[tuple[State, History]] = []

        empty: History = frozenset()
        for state in sorted(automaton.initial_states, key=repr, reverse=True):
            product.add_initial(name(state, empty))
            stack.append((state, empty))

        while stack:
            state, history = stack.pop()
            marker = (state, history_id(history))
            if marker in visited:
                continue
            if len(visited) >= self.max_product_states:
                raise ExplorationError(
                    f"Rigid-name product exceeded {self.max_product_states} states",
                    explored=len(visited),
                )
            visited.add(marker)

            source = name(state, history)
            if state in final:
                product.add_final(source)

            outgoing = list(automaton.outgoing(state))
            candidates = [history | {symbol} for symbol, _ in outgoing]
            answers = self.check_all_sequences([time_points(c) for c in candidates], rigid)

            successors: list[tuple[State, History]] = []
            for (symbol, targets), candidate, ok in zip(outgoing, candidates, answers):
                if not ok:
                    continue
                for target in sorted(targets, key=repr):
                    product.add_transition(source, symbol, name(target, candidate))
                    successors.append((target, candidate))

            # Reverse so the first successor is explored first
            stack.extend(reversed(successors))

        logger.debug(
            "Rigid-name product: %d states, %d transitions, %d histories in %.3fs",
            product.num_states,
            product.num_transitions,
            len(history_ids),
            time.perf_counter() - start,
        )
        return product


__all__ = [
    "History",
    "HistoryKey",
    "history_key",
    "complete_symbol",
    "AutomatonBuilder",
]

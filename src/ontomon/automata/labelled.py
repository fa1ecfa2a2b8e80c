"""Labelled transition automata with acceptance trimming.

This module provides:
- Symbol: transition label, a set of signed literals with value semantics
- LabelledAutomaton: initial/final states and a transition relation
  δ: State → Symbol → set[State], plus SCC-based trimming

A LabelledAutomaton is a tuple (Q, Σ, δ, I, F) where:
- Q: states, implicitly every state mentioned in I, F or δ
- Σ: symbols (sets of literals)
- δ: partial transition relation
- I ⊆ Q: initial states
- F ⊆ Q: final (accepting) states, read with Büchi acceptance

Storage is arena-style: states and symbols are interned into dense integer
tables and δ is an adjacency map over those integers. The public API speaks
in state identifiers and :class:`Symbol` values.

Trimming removes every state that cannot lie on an accepting run, i.e. a run
visiting a final state infinitely often:

1. Add a synthetic root with one edge to every initial state.
2. Compute the SCCs of the augmented graph (iterative Tarjan) and drop the
   root's own SCC.
3. An SCC is a candidate for removal if it holds no final state, or if it is
   a single state without a self-loop (visiting it once is not a cycle).
4. A candidate SCC is bad if none of its edges leads to a state that is
   neither bad nor inside the SCC itself. Repeat until nothing changes.
5. The good states are the union of the surviving SCCs. Initial and final
   states, transition sources and destination sets are restricted to them;
   symbols left without destinations are dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from ..types import Literal, State, atoms_of
from .scc import strongly_connected_components

logger = logging.getLogger(__name__)

# Synthetic root used during trimming; real states are interned as ids >= 0
_ROOT = -1


# =============================================================================
# Symbols
# =============================================================================


@dataclass(frozen=True, order=True)
class Symbol:
    """A transition label: a set of signed literals.

    Literals are stored sorted and deduplicated, so two symbols with the
    same literals are equal and hash alike regardless of construction order.

    Attributes:
        literals: Sorted, distinct literals (``"p"``, ``"!q"``, ``"<SIGMA>"``).
    """

    literals: tuple[Literal, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "literals", tuple(sorted(set(self.literals))))

    @classmethod
    def of(cls, *literals: Literal) -> Symbol:
        """Build a symbol from literals given as arguments."""
        return cls(literals)

    @classmethod
    def coerce(cls, value: Symbol | Literal | Iterable[Literal]) -> Symbol:
        """Accept a Symbol, a single literal or an iterable of literals."""
        if isinstance(value, Symbol):
            return value
        if isinstance(value, str):
            return cls((value,))
        return cls(tuple(value))

    @property
    def atoms(self) -> frozenset[str]:
        """Unsigned atoms mentioned by this symbol (wildcard excluded)."""
        return atoms_of(self.literals)

    def union(self, literals: Iterable[Literal]) -> Symbol:
        """Return a symbol holding these literals and the given ones."""
        return Symbol(self.literals + tuple(literals))

    def __iter__(self) -> Iterator[Literal]:
        return iter(self.literals)

    def __len__(self) -> int:
        return len(self.literals)

    def __contains__(self, literal: object) -> bool:
        return literal in self.literals

    def __repr__(self) -> str:
        return "{" + ", ".join(self.literals) + "}"


# =============================================================================
# Automaton
# =============================================================================


class LabelledAutomaton:
    """Automaton over symbol-labelled transitions with Büchi acceptance.

    Example::

        aut = LabelledAutomaton()
        aut.add_initial("s0")
        aut.add_final("s0")
        aut.add_transition("s0", Symbol.of("p"), "s0")
        aut.trim()   # keeps s0: a final state on a cycle
    """

    def __init__(self) -> None:
        self._state_ids: dict[State, int] = {}
        self._state_names: list[State] = []
        self._symbol_ids: dict[Symbol, int] = {}
        self._symbols: list[Symbol] = []
        self._initial: set[int] = set()
        self._final: set[int] = set()
        self._delta: dict[int, dict[int, set[int]]] = {}

    # -------------------------------------------------------------------------
    # Interning
    # -------------------------------------------------------------------------

    def _state_id(self, state: State) -> int:
        sid = self._state_ids.get(state)
        if sid is None:
            sid = len(self._state_names)
            self._state_ids[state] = sid
            self._state_names.append(state)
        return sid

    def _symbol_id(self, symbol: Symbol) -> int:
        sym_id = self._symbol_ids.get(symbol)
        if sym_id is None:
            sym_id = len(self._symbols)
            self._symbol_ids[symbol] = sym_id
            self._symbols.append(symbol)
        return sym_id

    def _names(self, ids: Iterable[int]) -> frozenset[State]:
        return frozenset(self._state_names[i] for i in ids)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def add_transition(
        self,
        source: State,
        symbol: Symbol | Literal | Iterable[Literal],
        target: State,
    ) -> None:
        """Insert ``target`` into δ[source][symbol].

        Intermediate entries are created as needed; δ only ever grows here.
        """
        src = self._state_id(source)
        sym = self._symbol_id(Symbol.coerce(symbol))
        dst = self._state_id(target)
        self._delta.setdefault(src, {}).setdefault(sym, set()).add(dst)

    def add_initial(self, state: State) -> None:
        """Declare a state initial."""
        self._initial.add(self._state_id(state))

    def add_final(self, state: State) -> None:
        """Declare a state final (accepting)."""
        self._final.add(self._state_id(state))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def initial_states(self) -> frozenset[State]:
        """Initial states."""
        return self._names(self._initial)

    @property
    def final_states(self) -> frozenset[State]:
        """Final (accepting) states."""
        return self._names(self._final)

    @property
    def states(self) -> frozenset[State]:
        """All states mentioned as initial, final or transition endpoint."""
        ids = set(self._initial) | self._final
        for src, by_symbol in self._delta.items():
            ids.add(src)
            for targets in by_symbol.values():
                ids.update(targets)
        return self._names(ids)

    @property
    def symbols(self) -> frozenset[Symbol]:
        """Symbols labelling at least one transition."""
        return frozenset(
            self._symbols[sym] for by_symbol in self._delta.values() for sym in by_symbol
        )

    @property
    def num_states(self) -> int:
        """Number of states."""
        return len(self.states)

    @property
    def num_transitions(self) -> int:
        """Number of (source, symbol, target) triples."""
        return sum(
            len(targets) for by_symbol in self._delta.values() for targets in by_symbol.values()
        )

    def transitions(self) -> Mapping[State, Mapping[Symbol, frozenset[State]]]:
        """Read-only view of δ."""
        return MappingProxyType(
            {
                self._state_names[src]: MappingProxyType(
                    {
                        self._symbols[sym]: self._names(targets)
                        for sym, targets in by_symbol.items()
                    }
                )
                for src, by_symbol in self._delta.items()
            }
        )

    def outgoing(self, state: State) -> Iterator[tuple[Symbol, frozenset[State]]]:
        """Yield ``(symbol, targets)`` pairs for the transitions leaving a state."""
        src = self._state_ids.get(state)
        if src is None:
            return
        for sym, targets in self._delta.get(src, {}).items():
            yield self._symbols[sym], self._names(targets)

    def successors(self, state: State) -> frozenset[State]:
        """All states reachable from ``state`` in one transition."""
        src = self._state_ids.get(state)
        if src is None:
            return frozenset()
        return self._names(self._successor_ids(src))

    def has_self_loop(self, state: State) -> bool:
        """Return True if some transition leads from ``state`` back to itself."""
        sid = self._state_ids.get(state)
        return sid is not None and self._has_self_loop(sid)

    def is_empty(self) -> bool:
        """Return True if there is no initial state (hence no run at all)."""
        return not self._initial

    def _successor_ids(self, src: int) -> set[int]:
        result: set[int] = set()
        for targets in self._delta.get(src, {}).values():
            result.update(targets)
        return result

    def _has_self_loop(self, sid: int) -> bool:
        return any(sid in targets for targets in self._delta.get(sid, {}).values())

    # -------------------------------------------------------------------------
    # Trimming
    # -------------------------------------------------------------------------

    def _reachable_sccs(self) -> list[frozenset[int]]:
        """SCCs of the graph reachable from the initial states."""

        def successors(node: int) -> Iterable[int]:
            if node == _ROOT:
                return sorted(self._initial)
            return [t for targets in self._delta.get(node, {}).values() for t in targets]

        sccs = strongly_connected_components(_ROOT, successors)
        return [scc for scc in sccs if _ROOT not in scc]

    def _is_removal_candidate(self, scc: frozenset[int]) -> bool:
        if not scc & self._final:
            return True
        if len(scc) == 1:
            (sid,) = scc
            return not self._has_self_loop(sid)
        return False

    def _escapes(self, scc: frozenset[int], bad: set[int]) -> bool:
        """Return True if some edge leaves ``scc`` towards a state not yet bad."""
        for sid in scc:
            for target in self._successor_ids(sid):
                if target not in scc and target not in bad:
                    return True
        return False

    def good_states(self) -> frozenset[State]:
        """States that can take part in an accepting run (without modifying δ)."""
        return self._names(self._good_ids())

    def _good_ids(self) -> set[int]:
        remaining = self._reachable_sccs()
        bad: set[int] = set()

        changed = True
        while changed:
            changed = False
            for scc in list(remaining):
                if self._is_removal_candidate(scc) and not self._escapes(scc, bad):
                    bad |= scc
                    remaining.remove(scc)
                    changed = True

        good: set[int] = set()
        for scc in remaining:
            good |= scc
        return good

    def trim(self) -> LabelledAutomaton:
        """Remove all states that cannot lie on an accepting run.

        Idempotent. An automaton without initial or without final states
        trims to the empty automaton.

        Returns:
            This automaton, for chaining.
        """
        before_states, before_transitions = self.num_states, self.num_transitions
        good = self._good_ids()

        initial = self._names(self._initial & good)
        final = self._names(self._final & good)
        delta: list[tuple[State, Symbol, frozenset[State]]] = []
        for src, by_symbol in self._delta.items():
            if src not in good:
                continue
            for sym, targets in by_symbol.items():
                kept = targets & good
                if kept:
                    delta.append((self._state_names[src], self._symbols[sym], self._names(kept)))

        self._reset()
        # Re-intern in a stable order so equal automata get equal arenas
        for state in sorted(initial, key=repr):
            self.add_initial(state)
        for state in sorted(final, key=repr):
            self.add_final(state)
        for source, symbol, targets in delta:
            for target in sorted(targets, key=repr):
                self.add_transition(source, symbol, target)

        logger.debug(
            "Trimmed automaton: %d -> %d states, %d -> %d transitions",
            before_states,
            self.num_states,
            before_transitions,
            self.num_transitions,
        )
        return self

    def _reset(self) -> None:
        self._state_ids.clear()
        self._state_names.clear()
        self._symbol_ids.clear()
        self._symbols.clear()
        self._initial.clear()
        self._final.clear()
        self._delta.clear()

    # -------------------------------------------------------------------------
    # Misc
    # -------------------------------------------------------------------------

    def copy(self) -> LabelledAutomaton:
        """Return an independent copy."""
        other = LabelledAutomaton()
        other._state_ids = dict(self._state_ids)
        other._state_names = list(self._state_names)
        other._symbol_ids = dict(self._symbol_ids)
        other._symbols = list(self._symbols)
        other._initial = set(self._initial)
        other._final = set(self._final)
        other._delta = {
            src: {sym: set(targets) for sym, targets in by_symbol.items()}
            for src, by_symbol in self._delta.items()
        }
        return other

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LabelledAutomaton):
            return NotImplemented
        return (
            self.initial_states == other.initial_states
            and self.final_states == other.final_states
            and _plain(self.transitions()) == _plain(other.transitions())
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"LabelledAutomaton(states={self.num_states}, "
            f"transitions={self.num_transitions}, "
            f"initial={len(self._initial)}, final={len(self._final)})"
        )

    def __str__(self) -> str:
        lines = ["Initial States:"]
        lines.extend(f"  {s}" for s in sorted(self.initial_states, key=repr))
        lines.append("")
        lines.append("Final States:")
        lines.extend(f"  {s}" for s in sorted(self.final_states, key=repr))
        lines.append("")
        lines.append("Transitions:")
        for source, by_symbol in self.transitions().items():
            for symbol, targets in by_symbol.items():
                rendered = ", ".join(str(t) for t in sorted(targets, key=repr))
                lines.append(f"  {source} --{symbol}--> {{{rendered}}}")
        return "\n".join(lines)


def _plain(
    view: Mapping[State, Mapping[Symbol, frozenset[State]]],
) -> dict[State, dict[Symbol, frozenset[State]]]:
    """Drop empty per-state entries so views compare by content."""
    return {src: dict(by_symbol) for src, by_symbol in view.items() if by_symbol}


__all__ = [
    "Symbol",
    "LabelledAutomaton",
]

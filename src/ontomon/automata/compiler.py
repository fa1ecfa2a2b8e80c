"""Interface to LTL-to-automaton compilers.

The monitoring core does not translate LTL itself. A compiler turns the
propositional abstraction of a formula into edges between states tagged
initial/final, each edge labelled by a set of literals. Anything producing
that shape (an external translator, a cached table, a test fixture) can be
used through :class:`LTLCompiler`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ..types import Literal, State


@dataclass(frozen=True)
class CompiledEdge:
    """One edge of a compiled automaton.

    Attributes:
        source: Source state identifier.
        target: Target state identifier.
        labels: Literals that hold when the edge is taken.
        source_initial: Whether the source is an initial state.
        source_final: Whether the source is a final state.
        target_initial: Whether the target is an initial state.
        target_final: Whether the target is a final state.
    """

    source: State
    target: State
    labels: frozenset[Literal]
    source_initial: bool = False
    source_final: bool = False
    target_initial: bool = False
    target_final: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", frozenset(self.labels))

    def __repr__(self) -> str:
        labels = ", ".join(sorted(self.labels))
        return f"{self.source} --{{{labels}}}--> {self.target}"


@runtime_checkable
class LTLCompiler(Protocol):
    """Protocol for LTL-to-automaton compilers."""

    def compile(self, formula: str) -> Iterable[CompiledEdge]:
        """Compile a propositional LTL formula into labelled edges."""
        ...


class StaticCompiler:
    """Compiler serving pre-computed edge tables.

    Useful for replaying the output of an external translator and for
    fixtures. Formula strings must match exactly.
    """

    def __init__(self, table: Mapping[str, Iterable[CompiledEdge]] | None = None):
        """Initialize the compiler.

        Args:
            table: Formula string to compiled edges
        """
        self._table: dict[str, tuple[CompiledEdge, ...]] = {}
        for formula, edges in (table or {}).items():
            self.register(formula, edges)

    def register(self, formula: str, edges: Iterable[CompiledEdge]) -> None:
        """Register (or replace) the edges for a formula."""
        self._table[formula] = tuple(edges)

    def compile(self, formula: str) -> Iterable[CompiledEdge]:
        """Return the registered edges.

        Raises:
            KeyError: If nothing was registered for the formula.
        """
        try:
            return self._table[formula]
        except KeyError:
            raise KeyError(f"No automaton registered for formula {formula!r}") from None

    def __contains__(self, formula: object) -> bool:
        return formula in self._table

    def __len__(self) -> int:
        return len(self._table)


__all__ = [
    "CompiledEdge",
    "LTLCompiler",
    "StaticCompiler",
]

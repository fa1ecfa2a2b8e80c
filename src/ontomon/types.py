"""
Foundation types for ontology-mediated runtime monitoring.

Identifiers, literal helpers and the error taxonomy shared by the logic,
automata and monitoring layers. Kept free of intra-package imports so every
layer can depend on it without cycles.

Literals:
    A literal is an atom name, optionally prefixed with ``!`` to denote
    its complement. The reserved atom ``<SIGMA>`` labels the wildcard
    transition and always maps to a vacuously true axiom.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field
from typing import TypeAlias

State: TypeAlias = Hashable
"""Automaton state identifier (``str`` in practice; any hashable, ordered token)."""

Literal: TypeAlias = str
"""Signed atom: ``"p"`` or ``"!p"``."""

SIGMA: Literal = "<SIGMA>"
"""Reserved wildcard atom, mapped to a tautology in every translation map."""

NEGATION_PREFIX = "!"


def is_negated(literal: Literal) -> bool:
    """Return True if the literal carries the negation prefix."""
    return literal.startswith(NEGATION_PREFIX)


def atom_of(literal: Literal) -> str:
    """Strip the negation prefix (if any) from a literal."""
    return literal[len(NEGATION_PREFIX) :] if is_negated(literal) else literal


def negate(literal: Literal) -> Literal:
    """Return the complementary literal.

    Raises:
        ValueError: If the literal is the wildcard atom, which has no complement.
    """
    if literal == SIGMA:
        raise ValueError("The wildcard atom has no complement")
    if is_negated(literal):
        return atom_of(literal)
    return NEGATION_PREFIX + literal


def atoms_of(literals: Iterable[Literal]) -> frozenset[str]:
    """Unsigned atoms mentioned by a collection of literals, wildcard excluded."""
    return frozenset(atom_of(lit) for lit in literals if lit != SIGMA)


# =============================================================================
# Errors
# =============================================================================


@dataclass
class OntomonError(Exception):
    """Base class for errors raised by the monitoring core.

    Attributes:
        message: Error message
    """

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class MalformedSymbolError(OntomonError):
    """A transition label references an atom missing from the translation map.

    Dropping such a transition would silently shrink the automaton's
    language, so it is always reported.

    Attributes:
        message: Error message
        literal: The offending literal
        available: Keys of the translation map that was consulted
    """

    literal: Literal = ""
    available: frozenset[str] = field(default_factory=frozenset)

    def __str__(self) -> str:
        if self.literal:
            return f"{self.message}: {self.literal!r}"
        return self.message


@dataclass
class ExplorationError(OntomonError):
    """Rigid-name product exploration failed to terminate within its bound.

    Attributes:
        message: Error message
        explored: Number of product states visited when the error was raised
    """

    explored: int = 0

    def __str__(self) -> str:
        return f"{self.message} (explored={self.explored})"


@dataclass
class MonitorInvariantError(OntomonError):
    """Both live state-sets of a monitor are empty.

    This means no interpretation is consistent with the trace for either
    the formula or its negation, which well-formed automata rule out.

    Attributes:
        message: Error message
        steps: Number of observations processed when it was detected
    """

    steps: int = 0

    def __str__(self) -> str:
        return f"{self.message} after {self.steps} step(s)"


__all__ = [
    "State",
    "Literal",
    "SIGMA",
    "NEGATION_PREFIX",
    "is_negated",
    "atom_of",
    "negate",
    "atoms_of",
    "OntomonError",
    "MalformedSymbolError",
    "ExplorationError",
    "MonitorInvariantError",
]

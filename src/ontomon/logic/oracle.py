"""Satisfiability oracles.

This module provides:
- SatisfiabilityOracle: the protocol the automaton builder and monitor consume
- StampingOracle: base class deriving multi-time-point checks from
  single-set checks by time-stamping flexible names
- ClashOracle: a lightweight clash detector over the shapes in
  :mod:`ontomon.logic.axioms`
- CachingOracle: thread-safe memoisation wrapper around any oracle

An oracle answers two questions:

(a) ``is_satisfiable(axioms)``: are the axioms jointly satisfiable?
(b) ``is_sequence_satisfiable(axiom_sets, rigid_names)``: is there an
    interpretation sequence where the i-th set holds at time point i and
    every rigid name is interpreted identically at all time points?

ClashOracle is not a description-logic reasoner. It normalises
conjunctions and double negations, propagates concept inclusions over
asserted concepts and reports a clash when an individual is asserted to be
both C and ¬C (or ⊥), or when a role assertion meets its negation.
Everything it cannot refute is reported satisfiable. Plug a real reasoner
in through the protocol for anything beyond that.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Hashable, Iterable, Sequence
from typing import Protocol, runtime_checkable

from .axioms import (
    Bottom,
    Complement,
    ConceptAssertion,
    Intersection,
    NegativeRoleAssertion,
    RoleAssertion,
    SubClassOf,
    Top,
    stamp,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class SatisfiabilityOracle(Protocol):
    """Protocol for joint-satisfiability checkers over axioms."""

    def is_satisfiable(self, axioms: Iterable[Hashable]) -> bool:
        """Return True iff the axioms are jointly satisfiable."""
        ...

    def is_sequence_satisfiable(
        self,
        axiom_sets: Sequence[Iterable[Hashable]],
        rigid_names: Iterable[str],
    ) -> bool:
        """Return True iff the time-indexed axiom sets are jointly satisfiable."""
        ...


class StampingOracle(ABC):
    """Oracle that reduces sequence checks to a single stamped check.

    Subclasses implement :meth:`is_satisfiable`. The i-th axiom set
    (1-based) has its flexible names replaced by copies for time point i,
    rigid names are left alone, and the union is checked once.
    """

    @abstractmethod
    def is_satisfiable(self, axioms: Iterable[Hashable]) -> bool: ...

    def is_sequence_satisfiable(
        self,
        axiom_sets: Sequence[Iterable[Hashable]],
        rigid_names: Iterable[str],
    ) -> bool:
        rigid = frozenset(rigid_names)
        stamped: set[Hashable] = set()
        for time, axioms in enumerate(axiom_sets, start=1):
            stamped.update(stamp(axiom, time, rigid) for axiom in axioms)
        return self.is_satisfiable(stamped)


# =============================================================================
# Clash detection
# =============================================================================


def _simplify(value: Hashable) -> Hashable:
    """Remove double negations and negated constants at the top level."""
    while isinstance(value, Complement) and isinstance(value.operand, Complement):
        value = value.operand.operand
    if isinstance(value, Complement) and isinstance(value.operand, Bottom):
        return Top()
    if isinstance(value, Complement) and isinstance(value.operand, Top):
        return Bottom()
    return value


def _decompose(value: Hashable) -> list[Hashable]:
    """Flatten intersections into their simplified conjuncts."""
    value = _simplify(value)
    if isinstance(value, Intersection):
        parts: list[Hashable] = []
        for operand in value.operands:
            parts.extend(_decompose(operand))
        return parts
    return [value]


class ClashOracle(StampingOracle):
    """Reference oracle reporting unsatisfiability only on obvious clashes.

    Example::

        oracle = ClashOracle()
        a = ConceptAssertion(concept("A"), "x")
        oracle.is_satisfiable({a})                  # True
        oracle.is_satisfiable({a, complement(a)})   # False
    """

    def is_satisfiable(self, axioms: Iterable[Hashable]) -> bool:
        facts: dict[str, set[Hashable]] = {}
        positive_roles: set[tuple[Hashable, str, str]] = set()
        negative_roles: set[tuple[Hashable, str, str]] = set()
        inclusions: list[tuple[Hashable, list[Hashable]]] = []

        for axiom in axioms:
            if isinstance(axiom, ConceptAssertion):
                facts.setdefault(axiom.individual, set()).update(_decompose(axiom.concept))
            elif isinstance(axiom, RoleAssertion):
                positive_roles.add((axiom.role, axiom.subject, axiom.object))
                facts.setdefault(axiom.subject, set())
                facts.setdefault(axiom.object, set())
            elif isinstance(axiom, NegativeRoleAssertion):
                negative_roles.add((axiom.role, axiom.subject, axiom.object))
            elif isinstance(axiom, SubClassOf):
                inclusions.append((_simplify(axiom.sub), _decompose(axiom.sup)))

        if positive_roles & negative_roles:
            return False

        # Saturate asserted concepts under the inclusions
        changed = True
        while changed:
            changed = False
            for sub, sup_parts in inclusions:
                for concepts in facts.values():
                    if isinstance(sub, Top) or sub in concepts:
                        missing = [part for part in sup_parts if part not in concepts]
                        if missing:
                            concepts.update(missing)
                            changed = True

        for individual, concepts in facts.items():
            if any(isinstance(c, Bottom) for c in concepts):
                logger.debug("Clash: %s is asserted to be ⊥", individual)
                return False
            for c in concepts:
                if isinstance(c, Complement) and _simplify(c.operand) in concepts:
                    logger.debug("Clash: %s is asserted to be both %r and %r", individual, c.operand, c)
                    return False

        return True


# =============================================================================
# Memoisation
# =============================================================================


class CachingOracle:
    """Memoising wrapper around another oracle.

    Answers are keyed by the frozen axiom set (and, for sequence checks,
    the tuple of frozen sets plus the rigid names), so repeated checks of
    the same edge against the same observation hit the cache.

    Thread Safety:
        The memo tables are protected by an RLock. The wrapped oracle is
        called outside the lock, so concurrent misses on the same key may
        both reach it; the answers are identical and the second write is a
        no-op.
    """

    def __init__(self, oracle: SatisfiabilityOracle):
        """Initialize the cache.

        Args:
            oracle: The oracle whose answers are memoised
        """
        self.oracle = oracle
        self._lock = threading.RLock()
        self._single: dict[frozenset[Hashable], bool] = {}
        self._sequence: dict[tuple[tuple[frozenset[Hashable], ...], frozenset[str]], bool] = {}
        self.hits = 0
        self.misses = 0

    def is_satisfiable(self, axioms: Iterable[Hashable]) -> bool:
        key = frozenset(axioms)
        with self._lock:
            if key in self._single:
                self.hits += 1
                return self._single[key]
            self.misses += 1

        result = self.oracle.is_satisfiable(key)

        with self._lock:
            self._single[key] = result
        return result

    def is_sequence_satisfiable(
        self,
        axiom_sets: Sequence[Iterable[Hashable]],
        rigid_names: Iterable[str],
    ) -> bool:
        frozen_sets = tuple(frozenset(axioms) for axioms in axiom_sets)
        key = (frozen_sets, frozenset(rigid_names))
        with self._lock:
            if key in self._sequence:
                self.hits += 1
                return self._sequence[key]
            self.misses += 1

        result = self.oracle.is_sequence_satisfiable(frozen_sets, key[1])

        with self._lock:
            self._sequence[key] = result
        return result

    def clear(self) -> None:
        """Drop all memoised answers and reset the counters."""
        with self._lock:
            self._single.clear()
            self._sequence.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._single) + len(self._sequence)


__all__ = [
    "SatisfiabilityOracle",
    "StampingOracle",
    "ClashOracle",
    "CachingOracle",
]

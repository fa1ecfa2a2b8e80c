"""Axiom shapes for labelled propositions.

This module provides:
- A closed set of concept, role and axiom shapes (ALC with assertions)
- Complement construction for labelled axioms
- Time-stamping of flexible (non-rigid) names for multi-time-point checks

The monitoring core treats axioms as opaque hashable values and only hands
them to a satisfiability oracle. These shapes are what the bundled oracles
and the serialization layer understand; any other hashable value passes
through :func:`stamp` unchanged.

Stamping:
    When several time points are checked jointly, every concept or role
    name that is not rigid is replaced by a copy suffixed with the time
    point (``A`` at time 2 becomes ``A@2``). Rigid names are shared across
    all time points, which is what makes them invariants.
"""

from __future__ import annotations

import hashlib
from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from typing import TypeAlias

# =============================================================================
# Roles
# =============================================================================


@dataclass(frozen=True)
class RoleName:
    """Named role (object property).

    Attributes:
        name: Role identifier.
    """

    name: str

    def __repr__(self) -> str:
        return self.name


@dataclass(frozen=True)
class InverseRole:
    """Inverse of a role: r⁻."""

    role: Role

    def __repr__(self) -> str:
        return f"{self.role}⁻"


Role: TypeAlias = "RoleName | InverseRole"


# =============================================================================
# Concepts
# =============================================================================


@dataclass(frozen=True)
class ConceptName:
    """Named concept (class).

    Attributes:
        name: Concept identifier.
    """

    name: str

    def __repr__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Top:
    """The universal concept ⊤."""

    def __repr__(self) -> str:
        return "⊤"


@dataclass(frozen=True)
class Bottom:
    """The empty concept ⊥."""

    def __repr__(self) -> str:
        return "⊥"


@dataclass(frozen=True)
class Complement:
    """Concept negation: ¬C."""

    operand: Concept

    def __repr__(self) -> str:
        return f"¬{self.operand}"


@dataclass(frozen=True)
class Intersection:
    """Concept conjunction: C₁ ⊓ … ⊓ Cₙ."""

    operands: tuple[Concept, ...]

    def __repr__(self) -> str:
        return "(" + " ⊓ ".join(repr(op) for op in self.operands) + ")"


@dataclass(frozen=True)
class Union:
    """Concept disjunction: C₁ ⊔ … ⊔ Cₙ."""

    operands: tuple[Concept, ...]

    def __repr__(self) -> str:
        return "(" + " ⊔ ".join(repr(op) for op in self.operands) + ")"


@dataclass(frozen=True)
class Existential:
    """Existential restriction: ∃r.C."""

    role: Role
    filler: Concept

    def __repr__(self) -> str:
        return f"∃{self.role}.{self.filler}"


@dataclass(frozen=True)
class Universal:
    """Value restriction: ∀r.C."""

    role: Role
    filler: Concept

    def __repr__(self) -> str:
        return f"∀{self.role}.{self.filler}"


Concept: TypeAlias = (
    "ConceptName | Top | Bottom | Complement | Intersection | Union | Existential | Universal"
)


# =============================================================================
# Axioms
# =============================================================================


@dataclass(frozen=True)
class ConceptAssertion:
    """Concept assertion: C(a)."""

    concept: Concept
    individual: str

    def __repr__(self) -> str:
        return f"{self.concept}({self.individual})"


@dataclass(frozen=True)
class RoleAssertion:
    """Role assertion: r(a, b)."""

    role: Role
    subject: str
    object: str

    def __repr__(self) -> str:
        return f"{self.role}({self.subject}, {self.object})"


@dataclass(frozen=True)
class NegativeRoleAssertion:
    """Negated role assertion: ¬r(a, b)."""

    role: Role
    subject: str
    object: str

    def __repr__(self) -> str:
        return f"¬{self.role}({self.subject}, {self.object})"


@dataclass(frozen=True)
class SubClassOf:
    """Concept inclusion: C ⊑ D."""

    sub: Concept
    sup: Concept

    def __repr__(self) -> str:
        return f"{self.sub} ⊑ {self.sup}"


Axiom: TypeAlias = "ConceptAssertion | RoleAssertion | NegativeRoleAssertion | SubClassOf"

TAUTOLOGY = SubClassOf(Top(), Top())
"""⊤ ⊑ ⊤, the axiom the wildcard atom translates to."""

# Individuals introduced when complementing concept inclusions
HELPER_INDIVIDUAL_PREFIX = "ontomon:aHelp"


# =============================================================================
# Constructors
# =============================================================================


def concept(name: str) -> ConceptName:
    """Shorthand for a named concept."""
    return ConceptName(name)


def role(name: str) -> RoleName:
    """Shorthand for a named role."""
    return RoleName(name)


def conjoin(*operands: Concept) -> Intersection:
    """Build an intersection from its operands."""
    return Intersection(tuple(operands))


def disjoin(*operands: Concept) -> Union:
    """Build a union from its operands."""
    return Union(tuple(operands))


def helper_individual(inclusion: SubClassOf) -> str:
    """Name of the helper individual witnessing the complement of an inclusion."""
    digest = hashlib.sha256(repr(inclusion).encode("utf-8")).hexdigest()[:16]
    return f"{HELPER_INDIVIDUAL_PREFIX}{digest}"


def complement(axiom: Axiom, individual: str | None = None) -> Axiom:
    """Return an axiom expressing the negation of a labelled axiom.

    - C(a)      becomes (¬C)(a)
    - r(a, b)   becomes ¬r(a, b), and vice versa
    - C ⊑ D     becomes (C ⊓ ¬D)(x) for a helper individual x

    Args:
        axiom: The axiom to complement.
        individual: Helper individual for inclusions. When omitted it is
            derived from the inclusion, so equal inclusions get the same
            helper and distinct ones get distinct helpers.

    Returns:
        The complementary axiom.

    Raises:
        TypeError: If the axiom shape has no complement.
    """
    if isinstance(axiom, ConceptAssertion):
        return ConceptAssertion(Complement(axiom.concept), axiom.individual)

    if isinstance(axiom, RoleAssertion):
        return NegativeRoleAssertion(axiom.role, axiom.subject, axiom.object)

    if isinstance(axiom, NegativeRoleAssertion):
        return RoleAssertion(axiom.role, axiom.subject, axiom.object)

    if isinstance(axiom, SubClassOf):
        if individual is None:
            individual = helper_individual(axiom)
        return ConceptAssertion(conjoin(axiom.sub, Complement(axiom.sup)), individual)

    raise TypeError(f"Cannot complement axiom of type {type(axiom).__name__}")


# =============================================================================
# Time-stamping of flexible names
# =============================================================================


def stamp_name(name: str, time: int, rigid_names: frozenset[str]) -> str:
    """Return the time-stamped copy of a name, or the name itself if rigid."""
    if name in rigid_names:
        return name
    return f"{name}@{time}"


def stamp_role(value: Role, time: int, rigid_names: frozenset[str]) -> Role:
    """Stamp the flexible names inside a role expression."""
    if isinstance(value, RoleName):
        return RoleName(stamp_name(value.name, time, rigid_names))
    if isinstance(value, InverseRole):
        return InverseRole(stamp_role(value.role, time, rigid_names))
    return value


def stamp_concept(value: Concept, time: int, rigid_names: frozenset[str]) -> Concept:
    """Stamp the flexible names inside a concept expression."""
    if isinstance(value, ConceptName):
        return ConceptName(stamp_name(value.name, time, rigid_names))
    if isinstance(value, Complement):
        return Complement(stamp_concept(value.operand, time, rigid_names))
    if isinstance(value, Intersection):
        return Intersection(tuple(stamp_concept(op, time, rigid_names) for op in value.operands))
    if isinstance(value, Union):
        return Union(tuple(stamp_concept(op, time, rigid_names) for op in value.operands))
    if isinstance(value, Existential):
        return Existential(
            stamp_role(value.role, time, rigid_names),
            stamp_concept(value.filler, time, rigid_names),
        )
    if isinstance(value, Universal):
        return Universal(
            stamp_role(value.role, time, rigid_names),
            stamp_concept(value.filler, time, rigid_names),
        )
    # ⊤, ⊥ and unknown shapes carry no names
    return value


def stamp(axiom: Hashable, time: int, rigid_names: Iterable[str] = ()) -> Hashable:
    """Replace every flexible name in an axiom by its copy for ``time``.

    Individuals are never stamped. Values that are not one of the axiom
    shapes of this module are returned unchanged.

    Args:
        axiom: The axiom to stamp.
        time: Time point (1-based in the bundled oracles).
        rigid_names: Concept and role names that keep their identity.

    Returns:
        The stamped axiom.
    """
    rigid = frozenset(rigid_names)

    if isinstance(axiom, ConceptAssertion):
        return ConceptAssertion(stamp_concept(axiom.concept, time, rigid), axiom.individual)

    if isinstance(axiom, RoleAssertion):
        return RoleAssertion(stamp_role(axiom.role, time, rigid), axiom.subject, axiom.object)

    if isinstance(axiom, NegativeRoleAssertion):
        return NegativeRoleAssertion(
            stamp_role(axiom.role, time, rigid), axiom.subject, axiom.object
        )

    if isinstance(axiom, SubClassOf):
        return SubClassOf(stamp_concept(axiom.sub, time, rigid), stamp_concept(axiom.sup, time, rigid))

    return axiom


__all__ = [
    # Roles
    "RoleName",
    "InverseRole",
    "Role",
    # Concepts
    "ConceptName",
    "Top",
    "Bottom",
    "Complement",
    "Intersection",
    "Union",
    "Existential",
    "Universal",
    "Concept",
    # Axioms
    "ConceptAssertion",
    "RoleAssertion",
    "NegativeRoleAssertion",
    "SubClassOf",
    "Axiom",
    "TAUTOLOGY",
    "HELPER_INDIVIDUAL_PREFIX",
    "helper_individual",
    # Constructors
    "concept",
    "role",
    "conjoin",
    "disjoin",
    "complement",
    # Stamping
    "stamp_name",
    "stamp_role",
    "stamp_concept",
    "stamp",
]

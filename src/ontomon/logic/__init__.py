"""Logic layer: axiom shapes, satisfiability oracles and temporal formulas.

This module provides:
- Concept, role and axiom shapes with complement and time-stamping
- The SatisfiabilityOracle protocol and reference oracles
- TemporalFormula with negation and conjunction combinators
"""

from __future__ import annotations

from ontomon.logic.axioms import (
    TAUTOLOGY,
    Axiom,
    Bottom,
    Complement,
    Concept,
    ConceptAssertion,
    ConceptName,
    Existential,
    Intersection,
    InverseRole,
    NegativeRoleAssertion,
    Role,
    RoleAssertion,
    RoleName,
    SubClassOf,
    Top,
    Union,
    Universal,
    complement,
    concept,
    conjoin,
    disjoin,
    role,
    stamp,
)
from ontomon.logic.formula import TemporalFormula
from ontomon.logic.oracle import (
    CachingOracle,
    ClashOracle,
    SatisfiabilityOracle,
    StampingOracle,
)

__all__ = [
    # --- Axioms ---
    "RoleName",
    "InverseRole",
    "Role",
    "ConceptName",
    "Top",
    "Bottom",
    "Complement",
    "Intersection",
    "Union",
    "Existential",
    "Universal",
    "Concept",
    "ConceptAssertion",
    "RoleAssertion",
    "NegativeRoleAssertion",
    "SubClassOf",
    "Axiom",
    "TAUTOLOGY",
    "concept",
    "role",
    "conjoin",
    "disjoin",
    "complement",
    "stamp",
    # --- Oracles ---
    "SatisfiabilityOracle",
    "StampingOracle",
    "ClashOracle",
    "CachingOracle",
    # --- Formulas ---
    "TemporalFormula",
]

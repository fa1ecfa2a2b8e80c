"""Serialization for axioms, formulas, compiled edges and automata.

Round-trip guarantee: ``from_dict(to_dict(x)) == x`` for all supported types.

Supported types:
- All concept, role and axiom shapes of :mod:`ontomon.logic.axioms`
- TemporalFormula (translation map values must be supported axioms)
- CompiledEdge (state identifiers must be JSON-compatible)
- LabelledAutomaton (state identifiers must be JSON-compatible)

The produced dicts contain only lists, strings, booleans and nested dicts,
so they can be handed to :func:`json.dumps` directly. Shapes carry a
``"type"`` discriminator.
"""

from __future__ import annotations

from typing import Any

from ontomon.automata.compiler import CompiledEdge
from ontomon.automata.labelled import LabelledAutomaton, Symbol
from ontomon.logic.axioms import (
    Bottom,
    Complement,
    ConceptAssertion,
    ConceptName,
    Existential,
    Intersection,
    InverseRole,
    NegativeRoleAssertion,
    RoleAssertion,
    RoleName,
    SubClassOf,
    Top,
    Union,
    Universal,
)
from ontomon.logic.formula import TemporalFormula

# ── Role and concept serialization ─────────────────────────────────────


def role_to_dict(value: Any) -> dict[str, Any]:
    """Serialize a role expression.

    Raises:
        TypeError: If the role type is unknown.
    """
    if isinstance(value, RoleName):
        return {"type": "RoleName", "name": value.name}

    if isinstance(value, InverseRole):
        return {"type": "InverseRole", "role": role_to_dict(value.role)}

    raise TypeError(f"Cannot serialize role of type {type(value).__name__}")


def role_from_dict(data: dict[str, Any]) -> Any:
    """Deserialize a role expression.

    Raises:
        ValueError: If the type tag is unknown.
    """
    type_tag = data["type"]

    if type_tag == "RoleName":
        return RoleName(data["name"])

    if type_tag == "InverseRole":
        return InverseRole(role_from_dict(data["role"]))

    raise ValueError(f"Unknown role type tag: {type_tag!r}")


def concept_to_dict(value: Any) -> dict[str, Any]:
    """Serialize a concept expression.

    Raises:
        TypeError: If the concept type is unknown.
    """
    if isinstance(value, ConceptName):
        return {"type": "ConceptName", "name": value.name}

    if isinstance(value, Top):
        return {"type": "Top"}

    if isinstance(value, Bottom):
        return {"type": "Bottom"}

    if isinstance(value, Complement):
        return {"type": "Complement", "operand": concept_to_dict(value.operand)}

    if isinstance(value, Intersection):
        return {
            "type": "Intersection",
            "operands": [concept_to_dict(op) for op in value.operands],
        }

    if isinstance(value, Union):
        return {"type": "Union", "operands": [concept_to_dict(op) for op in value.operands]}

    if isinstance(value, Existential):
        return {
            "type": "Existential",
            "role": role_to_dict(value.role),
            "filler": concept_to_dict(value.filler),
        }

    if isinstance(value, Universal):
        return {
            "type": "Universal",
            "role": role_to_dict(value.role),
            "filler": concept_to_dict(value.filler),
        }

    raise TypeError(f"Cannot serialize concept of type {type(value).__name__}")


def concept_from_dict(data: dict[str, Any]) -> Any:
    """Deserialize a concept expression.

    Raises:
        ValueError: If the type tag is unknown.
    """
    type_tag = data["type"]

    if type_tag == "ConceptName":
        return ConceptName(data["name"])

    if type_tag == "Top":
        return Top()

    if type_tag == "Bottom":
        return Bottom()

    if type_tag == "Complement":
        return Complement(concept_from_dict(data["operand"]))

    if type_tag == "Intersection":
        return Intersection(tuple(concept_from_dict(op) for op in data["operands"]))

    if type_tag == "Union":
        return Union(tuple(concept_from_dict(op) for op in data["operands"]))

    if type_tag == "Existential":
        return Existential(role_from_dict(data["role"]), concept_from_dict(data["filler"]))

    if type_tag == "Universal":
        return Universal(role_from_dict(data["role"]), concept_from_dict(data["filler"]))

    raise ValueError(f"Unknown concept type tag: {type_tag!r}")


# ── Axiom serialization ────────────────────────────────────────────────


def axiom_to_dict(axiom: Any) -> dict[str, Any]:
    """Serialize an axiom.

    Raises:
        TypeError: If the axiom type is unknown.
    """
    if isinstance(axiom, ConceptAssertion):
        return {
            "type": "ConceptAssertion",
            "concept": concept_to_dict(axiom.concept),
            "individual": axiom.individual,
        }

    if isinstance(axiom, (RoleAssertion, NegativeRoleAssertion)):
        return {
            "type": type(axiom).__name__,
            "role": role_to_dict(axiom.role),
            "subject": axiom.subject,
            "object": axiom.object,
        }

    if isinstance(axiom, SubClassOf):
        return {
            "type": "SubClassOf",
            "sub": concept_to_dict(axiom.sub),
            "sup": concept_to_dict(axiom.sup),
        }

    raise TypeError(f"Cannot serialize axiom of type {type(axiom).__name__}")


def axiom_from_dict(data: dict[str, Any]) -> Any:
    """Deserialize an axiom.

    Raises:
        ValueError: If the type tag is unknown.
    """
    type_tag = data["type"]

    if type_tag == "ConceptAssertion":
        return ConceptAssertion(concept_from_dict(data["concept"]), data["individual"])

    if type_tag == "RoleAssertion":
        return RoleAssertion(role_from_dict(data["role"]), data["subject"], data["object"])

    if type_tag == "NegativeRoleAssertion":
        return NegativeRoleAssertion(
            role_from_dict(data["role"]), data["subject"], data["object"]
        )

    if type_tag == "SubClassOf":
        return SubClassOf(concept_from_dict(data["sub"]), concept_from_dict(data["sup"]))

    raise ValueError(f"Unknown axiom type tag: {type_tag!r}")


# ── Formula serialization ──────────────────────────────────────────────


def formula_to_dict(formula: TemporalFormula) -> dict[str, Any]:
    """Serialize a TemporalFormula."""
    return {
        "propositional_abstraction": formula.propositional_abstraction,
        "translation_map": {
            key: axiom_to_dict(axiom) for key, axiom in sorted(formula.translation_map.items())
        },
        "rigid_names": sorted(formula.rigid_names),
    }


def formula_from_dict(data: dict[str, Any]) -> TemporalFormula:
    """Deserialize a TemporalFormula."""
    return TemporalFormula(
        data["propositional_abstraction"],
        {key: axiom_from_dict(value) for key, value in data["translation_map"].items()},
        frozenset(data.get("rigid_names", ())),
    )


# ── Compiler output serialization ──────────────────────────────────────


def compiled_edge_to_dict(edge: CompiledEdge) -> dict[str, Any]:
    """Serialize a CompiledEdge."""
    return {
        "source": edge.source,
        "target": edge.target,
        "labels": sorted(edge.labels),
        "source_initial": edge.source_initial,
        "source_final": edge.source_final,
        "target_initial": edge.target_initial,
        "target_final": edge.target_final,
    }


def compiled_edge_from_dict(data: dict[str, Any]) -> CompiledEdge:
    """Deserialize a CompiledEdge."""
    return CompiledEdge(
        source=data["source"],
        target=data["target"],
        labels=frozenset(data["labels"]),
        source_initial=data.get("source_initial", False),
        source_final=data.get("source_final", False),
        target_initial=data.get("target_initial", False),
        target_final=data.get("target_final", False),
    )


# ── Automaton serialization ────────────────────────────────────────────


def automaton_to_dict(automaton: LabelledAutomaton) -> dict[str, Any]:
    """Serialize a LabelledAutomaton.

    Transitions are listed as ``{"source", "symbol", "targets"}`` entries in
    a deterministic order.
    """
    transitions = []
    for source, by_symbol in automaton.transitions().items():
        for symbol, targets in by_symbol.items():
            transitions.append(
                {
                    "source": source,
                    "symbol": list(symbol.literals),
                    "targets": sorted(targets, key=repr),
                }
            )
    transitions.sort(key=lambda t: (repr(t["source"]), t["symbol"]))
    return {
        "initial": sorted(automaton.initial_states, key=repr),
        "final": sorted(automaton.final_states, key=repr),
        "transitions": transitions,
    }


def automaton_from_dict(data: dict[str, Any]) -> LabelledAutomaton:
    """Deserialize a LabelledAutomaton."""
    automaton = LabelledAutomaton()
    for state in data["initial"]:
        automaton.add_initial(state)
    for state in data["final"]:
        automaton.add_final(state)
    for t_data in data["transitions"]:
        symbol = Symbol(tuple(t_data["symbol"]))
        for target in t_data["targets"]:
            automaton.add_transition(t_data["source"], symbol, target)
    return automaton


__all__ = [
    "role_to_dict",
    "role_from_dict",
    "concept_to_dict",
    "concept_from_dict",
    "axiom_to_dict",
    "axiom_from_dict",
    "formula_to_dict",
    "formula_from_dict",
    "compiled_edge_to_dict",
    "compiled_edge_from_dict",
    "automaton_to_dict",
    "automaton_from_dict",
]

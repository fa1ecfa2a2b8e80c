"""Temporal formulas over labelled axioms.

A :class:`TemporalFormula` couples the propositional abstraction of an LTL
formula (a string over atom names, as understood by the LTL compiler) with
the translation map that gives each atom its meaning as an axiom, and the
set of rigid names whose interpretation never changes over time.

Formulas are immutable. Negation and conjunction build new formulas; the
translation map is shared by reference where it is unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Hashable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ..types import NEGATION_PREFIX, SIGMA, Literal, MalformedSymbolError, atom_of, is_negated
from .axioms import TAUTOLOGY, complement

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _freeze(mapping: Mapping[str, Hashable]) -> Mapping[str, Hashable]:
    """Return a read-only mapping that always contains the wildcard entry."""
    if isinstance(mapping, MappingProxyType) and SIGMA in mapping:
        return mapping
    data = dict(mapping)
    data.setdefault(SIGMA, TAUTOLOGY)
    return MappingProxyType(data)


@dataclass(frozen=True)
class TemporalFormula:
    """LTL formula whose atoms stand for axioms.

    Attributes:
        propositional_abstraction: LTL formula over atom names, e.g. ``"[](p -> <>q)"``.
        translation_map: Literal to axiom. Holds ``p`` and ``!p`` for every
            atom plus the wildcard :data:`~ontomon.types.SIGMA`.
        rigid_names: Concept and role names that are time-invariant.
    """

    propositional_abstraction: str
    translation_map: Mapping[str, Hashable] = field(
        default_factory=lambda: MappingProxyType({SIGMA: TAUTOLOGY}),
        hash=False,
    )
    rigid_names: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "translation_map", _freeze(self.translation_map))
        object.__setattr__(self, "rigid_names", frozenset(self.rigid_names))

    def __repr__(self) -> str:
        return f"TemporalFormula({self.propositional_abstraction!r})"

    # -------------------------------------------------------------------------
    # Combinators
    # -------------------------------------------------------------------------

    def negation(self) -> TemporalFormula:
        """Return ¬φ, sharing this formula's translation map and rigid names."""
        return TemporalFormula(
            f"!({self.propositional_abstraction})",
            self.translation_map,
            self.rigid_names,
        )

    def conjunction(self, other: TemporalFormula) -> TemporalFormula:
        """Return φ ∧ ψ.

        Translation maps and rigid names are merged; on a key collision the
        entry of ``other`` wins.
        """
        return TemporalFormula(
            f"({self.propositional_abstraction}) && ({other.propositional_abstraction})",
            {**self.translation_map, **other.translation_map},
            self.rigid_names | other.rigid_names,
        )

    # -------------------------------------------------------------------------
    # Translation
    # -------------------------------------------------------------------------

    @property
    def atoms(self) -> frozenset[str]:
        """Unsigned atom names defined by the translation map (wildcard excluded)."""
        return frozenset(
            atom_of(key) for key in self.translation_map if key != SIGMA
        )

    def axiom_for(self, literal: Literal) -> Hashable:
        """Translate a single literal.

        Raises:
            MalformedSymbolError: If the literal has no entry in the map.
        """
        try:
            return self.translation_map[literal]
        except KeyError:
            raise MalformedSymbolError(
                "Literal has no axiom in the translation map",
                literal=literal,
                available=frozenset(self.translation_map),
            ) from None

    def axioms_for(self, literals: Iterable[Literal]) -> frozenset[Hashable]:
        """Translate a set of literals into the set of their axioms.

        Raises:
            MalformedSymbolError: If any literal has no entry in the map.
        """
        return frozenset(self.axiom_for(literal) for literal in literals)

    def mentioned_atoms(self) -> frozenset[str]:
        """Atoms of the translation map that occur in the propositional abstraction."""
        tokens = set(_IDENTIFIER.findall(self.propositional_abstraction))
        return frozenset(atom for atom in self.atoms if atom in tokens)

    def restricted(self) -> TemporalFormula:
        """Drop translation entries for atoms the formula never mentions.

        Smaller maps mean fewer completions when rigid names are present.
        The wildcard entry is always kept.
        """
        keep = self.mentioned_atoms()
        translation = {
            key: axiom
            for key, axiom in self.translation_map.items()
            if key == SIGMA or atom_of(key) in keep
        }
        return TemporalFormula(self.propositional_abstraction, translation, self.rigid_names)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_labelled_axioms(
        cls,
        propositional_abstraction: str,
        labelled_axioms: Mapping[str, Hashable],
        rigid_names: Iterable[str] = (),
    ) -> TemporalFormula:
        """Build a formula from ``label -> axiom`` pairs.

        Each label ``p`` is mapped to its axiom and ``!p`` to the axiom's
        complement (see :func:`ontomon.logic.axioms.complement`).

        Args:
            propositional_abstraction: LTL formula over the labels.
            labelled_axioms: Label to axiom. Labels must not start with ``!``.
            rigid_names: Names to treat as rigid.

        Returns:
            The formula.

        Raises:
            ValueError: If a label is negated or is the wildcard atom.
        """
        translation: dict[str, Hashable] = {SIGMA: TAUTOLOGY}
        for label, axiom in labelled_axioms.items():
            if is_negated(label) or label == SIGMA:
                raise ValueError(f"Invalid label for a labelled axiom: {label!r}")
            translation[label] = axiom
            translation[NEGATION_PREFIX + label] = complement(axiom)
        return cls(propositional_abstraction, translation, frozenset(rigid_names))


__all__ = [
    "TemporalFormula",
]

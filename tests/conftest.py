"""Shared fixtures: a tiny compiled-automaton table, oracle and formulas.

Atom ``p`` stands for the assertion A(x). The table holds hand-compiled
automata (state-based Büchi acceptance) for the formulas the tests monitor.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

import pytest

from ontomon.automata import AutomatonBuilder, CompiledEdge, StaticCompiler
from ontomon.logic import ClashOracle, ConceptAssertion, TemporalFormula, complement, concept
from ontomon.types import SIGMA


def edge(source: str, target: str, *labels: str, **flags: bool) -> CompiledEdge:
    """Shorthand for a compiled edge."""
    return CompiledEdge(source, target, frozenset(labels), **flags)


# s0 initial and final, loops on p
ALWAYS_P = [
    edge("s0", "s0", "p", source_initial=True, source_final=True, target_initial=True, target_final=True),
]

# s0 waits, s1 accepts forever once !p was read
EVENTUALLY_NOT_P = [
    edge("s0", "s0", SIGMA, source_initial=True, target_initial=True),
    edge("s0", "s1", "!p", source_initial=True, target_final=True),
    edge("s1", "s1", SIGMA, source_final=True, target_final=True),
]

EVENTUALLY_P = [
    edge("s0", "s0", SIGMA, source_initial=True, target_initial=True),
    edge("s0", "s1", "p", source_initial=True, target_final=True),
    edge("s1", "s1", SIGMA, source_final=True, target_final=True),
]

ALWAYS_NOT_P = [
    edge("s0", "s0", "!p", source_initial=True, source_final=True, target_initial=True, target_final=True),
]

NOW_P = [
    edge("init", "acc", "p", source_initial=True, target_final=True),
    edge("acc", "acc", SIGMA, source_final=True, target_final=True),
]

NOW_NOT_P = [
    edge("init", "acc", "!p", source_initial=True, target_final=True),
    edge("acc", "acc", SIGMA, source_final=True, target_final=True),
]

AUTOMATA: dict[str, list[CompiledEdge]] = {
    "p": NOW_P,
    "!(p)": NOW_NOT_P,
    "[]p": ALWAYS_P,
    "!([]p)": EVENTUALLY_NOT_P,
    "!(!([]p))": ALWAYS_P,
    "<>p": EVENTUALLY_P,
    "!(<>p)": ALWAYS_NOT_P,
    "!(!(<>p))": EVENTUALLY_P,
    # <>p under the constraint []p is certain, its negation impossible
    "(<>p) && ([]p)": ALWAYS_P,
    "(!(<>p)) && ([]p)": [],
    # references an atom no translation map defines
    "q": [edge("s0", "s0", "q", source_initial=True, source_final=True)],
}


@pytest.fixture(scope="session")
def a_x() -> ConceptAssertion:
    """The axiom A(x), meaning of atom p."""
    return ConceptAssertion(concept("A"), "x")


@pytest.fixture(scope="session")
def not_a_x(a_x: ConceptAssertion):
    """The axiom (¬A)(x), meaning of literal !p."""
    return complement(a_x)


@pytest.fixture(scope="session")
def compiler() -> StaticCompiler:
    """Compiler serving the hand-compiled table."""
    return StaticCompiler(AUTOMATA)


@pytest.fixture(scope="session")
def oracle() -> ClashOracle:
    """Clash-detecting reference oracle."""
    return ClashOracle()


@pytest.fixture(scope="session")
def builder(compiler: StaticCompiler, oracle: ClashOracle) -> AutomatonBuilder:
    """Sequential builder over the table and the clash oracle."""
    return AutomatonBuilder(compiler, oracle)


@pytest.fixture(scope="session")
def make_formula(a_x: ConceptAssertion) -> Callable[..., TemporalFormula]:
    """Factory for formulas over atom p (= A(x))."""

    def make(text: str, rigid_names: Iterable[str] = ()) -> TemporalFormula:
        return TemporalFormula.from_labelled_axioms(text, {"p": a_x}, rigid_names)

    return make

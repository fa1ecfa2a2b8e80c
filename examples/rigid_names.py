"""Rigid Names -- invariants across time points.

Demonstrates the difference between a flexible and a rigid concept name
when monitoring "p" (Certified(bob) holds now). With a rigid Certified,
information learned later constrains the first time point.
"""

import json

from ontomon import (
    SIGMA,
    AutomatonBuilder,
    CachingOracle,
    ClashOracle,
    CompiledEdge,
    Monitor,
    StaticCompiler,
    TemporalFormula,
)
from ontomon.logic import ConceptAssertion, complement, concept
from ontomon.serialization import automaton_to_dict

certified = ConceptAssertion(concept("Certified"), "bob")

compiler = StaticCompiler(
    {
        "p": [
            CompiledEdge("init", "acc", {"p"}, source_initial=True, target_final=True),
            CompiledEdge("acc", "acc", {SIGMA}, source_final=True, target_final=True),
        ],
        "!(p)": [
            CompiledEdge("init", "acc", {"!p"}, source_initial=True, target_final=True),
            CompiledEdge("acc", "acc", {SIGMA}, source_final=True, target_final=True),
        ],
    }
)
oracle = CachingOracle(ClashOracle())
builder = AutomatonBuilder(compiler, oracle)

trace = [set(), {complement(certified)}]

# =============================================================
# Flexible vs rigid
# =============================================================
for rigid_names in [(), ("Certified",)]:
    label = "rigid" if rigid_names else "flexible"
    print(f"=== Certified is {label} ===")

    formula = TemporalFormula.from_labelled_axioms("p", {"p": certified}, rigid_names)
    monitor = Monitor(formula, builder)
    automaton, _ = monitor.automata
    print(f"Automaton for p: {automaton.num_states} states, {automaton.num_transitions} transitions")

    for t, observation in enumerate(trace, start=1):
        shown = sorted(repr(axiom) for axiom in observation) or ["(nothing)"]
        print(f"  t={t}: observe {', '.join(shown):18s} -> {monitor.step(observation)}")
    print()

# =============================================================
# Inspecting the rigid-name product
# =============================================================
print("=== Product automaton (rigid) ===")
print(automaton)
print()
print(json.dumps(automaton_to_dict(automaton), indent=2))

print(f"\nOracle cache: {oracle.hits} hits, {oracle.misses} misses")

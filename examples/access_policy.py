"""Access Policy Monitoring -- ontology-aware runtime verification.

Demonstrates monitoring "[] authorized" where the atom stands for the
assertion Authorized(alice). Observations never mention Authorized
directly: the global context (a small TBox) lets the oracle infer it.
"""

from ontomon import (
    SIGMA,
    AutomatonBuilder,
    ClashOracle,
    CompiledEdge,
    Monitor,
    StaticCompiler,
    TemporalFormula,
)
from ontomon.logic import Complement, ConceptAssertion, SubClassOf, concept

# =============================================================
# Vocabulary
# =============================================================
print("=== Vocabulary ===")

authorized = ConceptAssertion(concept("Authorized"), "alice")
tbox = [
    SubClassOf(concept("Admin"), concept("Authorized")),
    SubClassOf(concept("Guest"), Complement(concept("Authorized"))),
]
formula = TemporalFormula.from_labelled_axioms("[]auth", {"auth": authorized})

for literal, axiom in sorted(formula.translation_map.items()):
    print(f"  {literal:8s} -> {axiom!r}")
for axiom in tbox:
    print(f"  context: {axiom!r}")

# =============================================================
# Compiled automata for []auth and its negation <>!auth
# =============================================================
compiler = StaticCompiler(
    {
        "[]auth": [
            CompiledEdge(
                "q0", "q0", {"auth"},
                source_initial=True, source_final=True,
                target_initial=True, target_final=True,
            ),
        ],
        "!([]auth)": [
            CompiledEdge("q0", "q0", {SIGMA}, source_initial=True, target_initial=True),
            CompiledEdge("q0", "q1", {"!auth"}, source_initial=True, target_final=True),
            CompiledEdge("q1", "q1", {SIGMA}, source_final=True, target_final=True),
        ],
    }
)

# =============================================================
# Monitoring a trace
# =============================================================
print("\n=== Trace ===")

monitor = Monitor(formula, AutomatonBuilder(compiler, ClashOracle()), global_context=tbox)
print(f"Initial verdict: {monitor.verdict()}")

trace = [
    ("alice logs in as admin", {ConceptAssertion(concept("Admin"), "alice")}),
    ("nothing known about alice", set()),
    ("alice is demoted to guest", {ConceptAssertion(concept("Guest"), "alice")}),
    ("alice is admin again", {ConceptAssertion(concept("Admin"), "alice")}),
]

for description, observation in trace:
    verdict = monitor.step(observation)
    formula_states, negation_states = monitor.current_state_pair()
    print(
        f"  {description:28s} -> {verdict!s:9s} "
        f"(live: {sorted(formula_states)} / {sorted(negation_states)})"
    )

print(f"\nSteps processed: {monitor.steps}")

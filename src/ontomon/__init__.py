"""
ontomon -- automaton-based runtime verification of temporal properties
over ontology-labelled observations.

LTL over labelled axioms | Oracle-filtered Büchi automata | Rigid names | Three-valued monitors

No runtime dependencies. Pure Python.
"""

from ontomon._version import __version__
from ontomon.automata import (
    AutomatonBuilder,
    CompiledEdge,
    LabelledAutomaton,
    LTLCompiler,
    StaticCompiler,
    Symbol,
)
from ontomon.logic import (
    CachingOracle,
    ClashOracle,
    SatisfiabilityOracle,
    TemporalFormula,
)
from ontomon.monitoring import Monitor, MonitorState, Verdict
from ontomon.types import (
    SIGMA,
    ExplorationError,
    MalformedSymbolError,
    MonitorInvariantError,
    OntomonError,
)

# NOTE: Full subpackage APIs are accessible via direct imports:
#   from ontomon.logic import ConceptAssertion, complement, stamp, ...
#   from ontomon.automata import complete_symbol, strongly_connected_components, ...
#   from ontomon.serialization import automaton_to_dict, formula_from_dict, ...

__all__ = [
    "__version__",
    # Formulas and oracles
    "TemporalFormula",
    "SatisfiabilityOracle",
    "ClashOracle",
    "CachingOracle",
    # Automata
    "Symbol",
    "LabelledAutomaton",
    "CompiledEdge",
    "LTLCompiler",
    "StaticCompiler",
    "AutomatonBuilder",
    # Monitoring
    "Verdict",
    "MonitorState",
    "Monitor",
    # Errors
    "SIGMA",
    "OntomonError",
    "MalformedSymbolError",
    "ExplorationError",
    "MonitorInvariantError",
]

"""Automaton layer for runtime monitoring.

This module provides:
- Symbol and LabelledAutomaton with SCC-based acceptance trimming
- Iterative Tarjan SCC computation
- The LTLCompiler protocol and a table-backed compiler
- AutomatonBuilder: oracle-filtered construction and the rigid-name product
"""

from __future__ import annotations

from ontomon.automata.builder import (
    AutomatonBuilder,
    History,
    HistoryKey,
    complete_symbol,
    history_key,
)
from ontomon.automata.compiler import CompiledEdge, LTLCompiler, StaticCompiler
from ontomon.automata.labelled import LabelledAutomaton, Symbol
from ontomon.automata.scc import strongly_connected_components

__all__ = [
    # --- Automata ---
    "Symbol",
    "LabelledAutomaton",
    "strongly_connected_components",
    # --- Compilation ---
    "CompiledEdge",
    "LTLCompiler",
    "StaticCompiler",
    # --- Construction ---
    "AutomatonBuilder",
    "History",
    "HistoryKey",
    "history_key",
    "complete_symbol",
]

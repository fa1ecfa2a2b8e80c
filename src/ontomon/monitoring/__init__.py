"""Runtime monitoring.

This module provides:
- Verdict: TRUE, FALSE or UNDECIDED
- MonitorState: live state-sets for a formula and its negation
- Monitor: dual-automaton monitor stepping over observations
"""

from __future__ import annotations

from ontomon.monitoring.monitor import Monitor, MonitorState, successor_states
from ontomon.monitoring.verdict import Verdict

__all__ = [
    "Verdict",
    "MonitorState",
    "Monitor",
    "successor_states",
]

"""Three-valued monitoring verdicts."""

from __future__ import annotations

from enum import Enum


class Verdict(str, Enum):
    """Outcome of monitoring a property on the trace seen so far."""

    TRUE = "true"  # every continuation satisfies the property
    FALSE = "false"  # no continuation satisfies the property
    UNDECIDED = "undecided"  # both are still possible

    def __str__(self) -> str:
        return self.name

    def is_conclusive(self) -> bool:
        """Return True for TRUE and FALSE, which no further observation can change."""
        return self is not Verdict.UNDECIDED

    def negate(self) -> Verdict:
        """Verdict of the negated property on the same trace."""
        if self is Verdict.TRUE:
            return Verdict.FALSE
        if self is Verdict.FALSE:
            return Verdict.TRUE
        return Verdict.UNDECIDED


__all__ = [
    "Verdict",
]

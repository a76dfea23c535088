"""Error taxonomy for the scoring engine.

Only :class:`InvalidInput` crosses the engine boundary.  The other two are
raised by :mod:`tryout_core.irt` and absorbed by the method ladder in
:mod:`tryout_core.engine`.
"""
from __future__ import annotations

from typing import Optional


class ScoringError(Exception):
    """Base class for scoring failures."""


class InvalidInput(ScoringError, ValueError):
    """Caller error: empty item set, unknown/duplicate ids, bad configuration."""


class NonConvergent(ScoringError):
    """The theta estimator hit its iteration cap."""

    def __init__(self, message: str, iterations: int, theta: Optional[float] = None) -> None:
        super().__init__(message)
        self.iterations = iterations
        self.theta = theta


class NumericGuard(ScoringError):
    """Non-finite estimate or vanishing test information."""

    def __init__(self, message: str, iterations: int = 0) -> None:
        super().__init__(message)
        self.iterations = iterations


__all__ = ["ScoringError", "InvalidInput", "NonConvergent", "NumericGuard"]

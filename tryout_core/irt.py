"""3PL IRT utilities used by the scoring engine.

This module provides the logistic probability, Fisher information, the
log-likelihood gradient and a clamped Newton (Fisher scoring) estimator for
the person ability ``theta``.  Everything here is a pure function of its
arguments so the engine can call it repeatedly with identical results.
"""
from __future__ import annotations

import logging
import math
from typing import Callable, List, Sequence, Tuple

from .config import (
    DEBUG_TRACE,
    LINE_SEARCH_HALVINGS,
    PROB_EPS,
    SE_BAND_GRID,
    THETA_MAX_STEP,
    TRACE_FIELDS,
)
from .errors import NonConvergent, NumericGuard
from .types import ThetaEstimate

__all__ = [
    "sigma",
    "p_3pl",
    "item_info",
    "total_info",
    "gradient",
    "log_likelihood",
    "estimate_theta",
    "se_from_info",
    "se_band",
]

log = logging.getLogger(__name__)

# (u, a, b, c): observed 0/1 response and the item's 3PL parameters.
Pattern = Sequence[Tuple[int, float, float, float]]


def _emit_trace(**values: object) -> None:
    if not DEBUG_TRACE:
        return
    ordered = [f"{key}={values[key]}" for key in TRACE_FIELDS if key in values]
    if ordered:
        log.info("trace %s", " ".join(ordered))


def sigma(x: float) -> float:
    """Return the logistic function ``σ(x) = 1 / (1 + e^{−x})``.

    The implementation guards against overflow for large negative inputs by
    handling the positive and negative halves of the real line separately.
    """

    if x >= 0:
        z = math.exp(-x)
        return 1.0 / (1.0 + z)
    z = math.exp(x)
    return z / (1.0 + z)


def _clamp_p(p: float) -> float:
    return min(max(p, PROB_EPS), 1.0 - PROB_EPS)


def p_3pl(theta: float, a: float, b: float, c: float) -> float:
    """Probability of a correct answer under the 3PL model.

    ``P(θ) = c + (1 − c) · σ(a (θ − b))``
    """

    return c + (1.0 - c) * sigma(a * (theta - b))


def item_info(theta: float, a: float, b: float, c: float) -> float:
    """Fisher information contributed by a single 3PL item.

    ``I_i(θ) = a² (P − c)² (1 − P) / ((1 − c)² P)`` with ``P`` clamped away
    from 0 and 1.
    """

    p = _clamp_p(p_3pl(theta, a, b, c))
    info = (a * a) * (p - c) ** 2 * (1.0 - p) / ((1.0 - c) ** 2 * p)
    return max(info, 0.0)


def total_info(theta: float, pattern: Pattern) -> float:
    return sum(item_info(theta, a, b, c) for _, a, b, c in pattern)


def gradient(theta: float, pattern: Pattern) -> float:
    """First derivative of the log-likelihood of ``pattern`` at ``theta``."""

    total = 0.0
    for u, a, b, c in pattern:
        p = _clamp_p(p_3pl(theta, a, b, c))
        s = sigma(a * (theta - b))
        dp = (1.0 - c) * a * s * (1.0 - s)
        total += (u - p) * dp / (p * (1.0 - p))
    return total


def log_likelihood(theta: float, pattern: Pattern) -> float:
    total = 0.0
    for u, a, b, c in pattern:
        p = _clamp_p(p_3pl(theta, a, b, c))
        total += math.log(p) if u else math.log(1.0 - p)
    return total


def se_from_info(info_total: float) -> float:
    """Convert accumulated Fisher information into a standard error."""

    return 1.0 / math.sqrt(max(info_total, PROB_EPS))


def estimate_theta(
    pattern: Pattern,
    *,
    theta0: float = 0.0,
    theta_min: float = -4.0,
    theta_max: float = 4.0,
    max_iterations: int = 25,
    epsilon: float = 0.001,
) -> ThetaEstimate:
    """Maximum-likelihood ``theta`` for a scored 0/1 ``pattern``.

    Each iteration takes the Newton step with the second derivative replaced
    by the negative test information, capped at ``THETA_MAX_STEP`` and clamped
    into ``[theta_min, theta_max]``.  A step that lowers the log-likelihood is
    halved until it does not, so steep items far from ``theta0`` cannot bounce
    the estimate between the bounds.  Perfect and zero patterns settle on a
    bound instead of running off to infinity.

    Raises
    ------
    NonConvergent
        ``max_iterations`` reached while the step is still ``>= epsilon``.
    NumericGuard
        Non-finite theta, or the test information vanished.
    """

    if not pattern:
        raise NumericGuard("empty response pattern")

    theta = min(max(float(theta0), theta_min), theta_max)
    history: List[float] = [theta]
    for iteration in range(1, max_iterations + 1):
        grad = gradient(theta, pattern)
        info = total_info(theta, pattern)
        if not math.isfinite(grad) or not math.isfinite(info) or info <= 0.0:
            raise NumericGuard(f"degenerate information at theta={theta}", iteration)

        step = grad / info
        if not math.isfinite(step):
            raise NumericGuard("non-finite theta step", iteration)
        step = min(max(step, -THETA_MAX_STEP), THETA_MAX_STEP)
        ll = log_likelihood(theta, pattern)
        theta_new = min(max(theta + step, theta_min), theta_max)
        for _ in range(LINE_SEARCH_HALVINGS):
            if log_likelihood(theta_new, pattern) >= ll:
                break
            step /= 2.0
            theta_new = min(max(theta + step, theta_min), theta_max)
        else:
            theta_new = theta
        _emit_trace(
            iteration=iteration,
            theta_before=round(theta, 6),
            theta_after=round(theta_new, 6),
            gradient=round(grad, 6),
            information=round(info, 6),
        )

        change = abs(theta_new - theta)
        theta = theta_new
        history.append(theta)
        if change < epsilon:
            info_final = total_info(theta, pattern)
            return ThetaEstimate(
                theta=theta,
                standard_error=se_from_info(info_final),
                information=info_final,
                iterations=iteration,
                converged=True,
                history=history,
            )

    raise NonConvergent(
        f"theta did not converge within {max_iterations} iterations", max_iterations, theta
    )


def _nearest_within(ok: Callable[[float], bool], theta: float, stop: float, step: float) -> float:
    # walk from theta toward stop; bisect the first cell whose far end passes
    inside = theta
    while True:
        t = inside + step
        if (step < 0 and t <= stop) or (step > 0 and t >= stop):
            t = stop
        if ok(t):
            for _ in range(50):
                mid = (inside + t) / 2.0
                if ok(mid):
                    t = mid
                else:
                    inside = mid
            return t
        if t == stop:
            return stop
        inside = t


def se_band(
    pattern: Pattern,
    theta: float,
    *,
    se_ceiling: float,
    theta_min: float = -4.0,
    theta_max: float = 4.0,
) -> Tuple[float, float]:
    """Nearest abilities below and above ``theta`` whose SE is within ``se_ceiling``.

    Information depends only on the item parameters, so every pattern over the
    same items shares these edges.  A side with no such ability reports its
    range bound.
    """

    def ok(t: float) -> bool:
        return se_from_info(total_info(t, pattern)) <= se_ceiling

    width = (theta_max - theta_min) / SE_BAND_GRID
    lo = _nearest_within(ok, theta, theta_min, -width)
    hi = _nearest_within(ok, theta, theta_max, width)
    return lo, hi

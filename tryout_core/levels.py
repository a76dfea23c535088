# tryout_core/levels.py
from __future__ import annotations
import math
from typing import Callable, Dict, Optional, Tuple

from .config import PERCENTILE_SLOPE, PERFORMANCE_BANDS, ScoringConfig
from .irt import sigma

ThetaTransform = Callable[[float, ScoringConfig], float]


def round_half_up(x: float) -> int:
    """Nearest integer with .5 going up, the rounding the result pages display."""
    return int(math.floor(float(x) + 0.5))


def _clamp_score(x: float, cfg: ScoringConfig) -> int:
    return round_half_up(max(0.0, min(float(cfg.score_max), x)))


def linear_transform(theta: float, cfg: ScoringConfig) -> float:
    # theta_range maps onto [0, score_max]
    lo, hi = cfg.theta_min, cfg.theta_max
    return (float(theta) - lo) / (hi - lo) * float(cfg.score_max)


def logistic_transform(theta: float, cfg: ScoringConfig) -> float:
    return sigma(PERCENTILE_SLOPE * float(theta)) * float(cfg.score_max)


TRANSFORMS: Dict[str, ThetaTransform] = {
    "linear": linear_transform,
    "logistic": logistic_transform,
}


def theta_to_score(theta: float, cfg: ScoringConfig, transform: Optional[ThetaTransform] = None) -> int:
    """Map theta onto the caller's score scale, rounded and clamped to [0, score_max]."""
    fn = transform or TRANSFORMS[cfg.score_transform]
    return _clamp_score(fn(theta, cfg), cfg)


def ratio_to_score(
    ratio: float,
    cfg: ScoringConfig,
    band: Optional[Tuple[float, float]] = None,
    transform: Optional[ThetaTransform] = None,
) -> int:
    """``ratio * score_max``; with ``band``, held between the theta scores of its edges.

    The band is set when an IRT estimate was rejected for its standard error:
    the fallback score then stays between the scores of the nearest abilities
    the IRT path would have accepted.
    """
    x = float(ratio) * float(cfg.score_max)
    if band is not None:
        fn = transform or TRANSFORMS[cfg.score_transform]
        floor_, ceiling = fn(band[0], cfg), fn(band[1], cfg)
        x = min(max(x, floor_), ceiling)
    return _clamp_score(x, cfg)


def performance_level(score: float, score_max: float = 100.0) -> str:
    pct = float(score) / float(score_max) * 100.0
    for floor, label in PERFORMANCE_BANDS:
        if pct >= floor:
            return label
    return PERFORMANCE_BANDS[-1][1]


def percentile(theta: float) -> int:
    """Share of the reference population (N(0,1) ability) below ``theta``, 0..100."""
    return round_half_up(sigma(PERCENTILE_SLOPE * float(theta)) * 100.0)

from __future__ import annotations
import math
from typing import Dict, List, Optional, Sequence, Tuple

from .config import ScoringConfig
from .types import Item, Outcome, Response


def _norm_option(value: object) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip().upper()
    return s or None


def _finite(x: object) -> bool:
    if x is None or isinstance(x, bool):
        return False
    try:
        return math.isfinite(float(x))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return False


def score_response(item: Item, response: Optional[Response]) -> Outcome:
    """Correctness is derived here, never taken from the caller."""
    chosen = _norm_option(response.selected_option) if response is not None else None
    if chosen is None:
        return "unanswered"
    return "correct" if chosen == _norm_option(item.correct_answer) else "wrong"


def resolve_discrimination(item: Item) -> Optional[float]:
    """``a`` with the 1.0 default applied; None when malformed."""
    if item.discrimination is None:
        return 1.0
    if not _finite(item.discrimination) or float(item.discrimination) <= 0:
        return None
    return float(item.discrimination)


def resolve_guessing(item: Item, cfg: ScoringConfig) -> Optional[float]:
    if item.guessing is None:
        return float(cfg.default_guessing)
    if not _finite(item.guessing) or not (0.0 <= float(item.guessing) < 1.0):
        return None
    return float(item.guessing)


def irt_params(item: Item, cfg: ScoringConfig) -> Optional[Tuple[float, float, float]]:
    """(a, b, c) when the item is usable for 3PL estimation, else None."""
    if not _finite(item.difficulty):
        return None
    a = resolve_discrimination(item)
    c = resolve_guessing(item, cfg)
    if a is None or c is None:
        return None
    return a, float(item.difficulty), c  # type: ignore[arg-type]


def _difficulty_weight(b: float) -> float:
    # harder items earn more, bounded to 1..3
    return max(1.0, min(3.0, 2.0 + b))


def item_weight(item: Item, scheme: str) -> Optional[float]:
    if not _finite(item.difficulty):
        return None
    a = resolve_discrimination(item)
    if a is None:
        return None
    b = float(item.difficulty)  # type: ignore[arg-type]
    if scheme == "difficulty":
        return _difficulty_weight(b)
    if scheme == "combined":
        return a * _difficulty_weight(b)
    return a


def weighted_ratio(
    items: Sequence[Item], outcomes: Dict[str, Outcome], cfg: ScoringConfig
) -> Optional[float]:
    """Weighted share of credit earned, or None when difficulty data is too sparse.

    Items without usable difficulty are left out of both sums; at least
    ``min_weighted_coverage`` of the item set must remain.
    """
    weights: List[Tuple[str, float]] = []
    for it in items:
        w = item_weight(it, cfg.weighted_scheme)
        if w is not None:
            weights.append((it.id, w))
    if not weights or len(weights) < cfg.min_weighted_coverage * len(items):
        return None
    total = sum(w for _, w in weights)
    if total <= 0:
        return None
    earned = sum(w for iid, w in weights if outcomes.get(iid) == "correct")
    return earned / total


def simple_ratio(outcomes: Dict[str, Outcome]) -> float:
    """correct / totalQuestions; unanswered counts against the candidate."""
    total = len(outcomes)
    if total == 0:
        return 0.0
    return sum(1 for o in outcomes.values() if o == "correct") / total

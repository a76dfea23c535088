# tryout_core/engine.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging, math

from .types import Item, Method, Outcome, Response, ScoringResult, Statistics, ThetaEstimate
from .config import ScoringConfig
from .errors import InvalidInput, NonConvergent, NumericGuard
from .levels import ThetaTransform, percentile, performance_level, ratio_to_score, theta_to_score
from .scoring import irt_params, score_response, simple_ratio, weighted_ratio
from .topics import analyze_topics
from . import irt


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class _IrtOutcome:
    estimate: Optional[ThetaEstimate]
    reason: Optional[str] = None
    iterations: Optional[int] = None
    converged: Optional[bool] = None
    band: Optional[Tuple[float, float]] = None


def _index_items(items: Iterable[Item]) -> Dict[str, Item]:
    index: Dict[str, Item] = {}
    for it in items:
        iid = it.id if isinstance(it.id, str) else None
        if not iid or not iid.strip():
            raise InvalidInput("item id must be a non-empty string")
        if iid in index:
            raise InvalidInput(f"duplicate item id: {iid}")
        index[iid] = it
    if not index:
        raise InvalidInput("no items to score")
    return index


def _index_responses(responses: Iterable[Response], index: Dict[str, Item]) -> Dict[str, Response]:
    seen: Dict[str, Response] = {}
    for r in responses:
        if r.item_id not in index:
            raise InvalidInput(f"response references unknown item: {r.item_id}")
        if r.item_id in seen:
            raise InvalidInput(f"duplicate response for item: {r.item_id}")
        seen[r.item_id] = r
    return seen


def _statistics(outcomes: Dict[str, Outcome]) -> Statistics:
    correct = sum(1 for o in outcomes.values() if o == "correct")
    wrong = sum(1 for o in outcomes.values() if o == "wrong")
    unanswered = sum(1 for o in outcomes.values() if o == "unanswered")
    total = len(outcomes)
    return Statistics(
        correct=correct,
        wrong=wrong,
        unanswered=unanswered,
        total_questions=total,
        accuracy=(correct / total) if total else 0.0,
    )


def _irt_pattern(
    items: Sequence[Item], outcomes: Dict[str, Outcome], cfg: ScoringConfig
) -> Tuple[List[Tuple[int, float, float, float]], int]:
    """Scored 0/1 pattern over well-formed items and the count actually answered."""
    pattern: List[Tuple[int, float, float, float]] = []
    answered = 0
    for it in items:
        params = irt_params(it, cfg)
        if params is None:
            continue
        a, b, c = params
        outcome = outcomes[it.id]
        if outcome != "unanswered":
            answered += 1
        pattern.append((1 if outcome == "correct" else 0, a, b, c))
    return pattern, answered


class ScoringEngine:
    """Stateless scorer: ``irt`` first, then ``weighted``, then ``simple``.

    The engine keeps only its configuration, so one instance may serve any
    number of concurrent calls.
    """

    def __init__(self, config: Optional[ScoringConfig] = None, transform: Optional[ThetaTransform] = None):
        self.config = (config or ScoringConfig()).validate()
        self.transform = transform

    def score(self, responses: Iterable[Response], items: Iterable[Item]) -> ScoringResult:
        cfg = self.config
        index = _index_items(items)
        answers = _index_responses(responses, index)

        ordered = [index[iid] for iid in sorted(index)]
        outcomes: Dict[str, Outcome] = {it.id: score_response(it, answers.get(it.id)) for it in ordered}
        stats = _statistics(outcomes)
        topics = analyze_topics(ordered, outcomes)

        attempt = self._try_irt(ordered, outcomes)
        if attempt.estimate is not None:
            est = attempt.estimate
            final = theta_to_score(est.theta, cfg, self.transform)
            log.debug("irt theta=%.4f se=%.4f iterations=%d", est.theta, est.standard_error, est.iterations)
            return ScoringResult(
                method="irt",
                final_score=final,
                statistics=stats,
                topic_analysis=topics,
                performance_level=performance_level(final, cfg.score_max),
                theta=est.theta,
                standard_error=est.standard_error,
                percentile=percentile(est.theta),
                iterations=est.iterations,
                converged=est.converged,
            )

        method: Method = "simple"
        ratio = weighted_ratio(ordered, outcomes, cfg)
        if ratio is not None:
            method = "weighted"
        else:
            ratio = simple_ratio(outcomes)
        final = ratio_to_score(ratio, cfg, attempt.band, self.transform)
        log.debug("fallback method=%s reason=%s score=%d", method, attempt.reason, final)
        return ScoringResult(
            method=method,
            final_score=final,
            statistics=stats,
            topic_analysis=topics,
            performance_level=performance_level(final, cfg.score_max),
            iterations=attempt.iterations,
            converged=attempt.converged,
            fallback_reason=attempt.reason,
        )

    def _try_irt(self, items: Sequence[Item], outcomes: Dict[str, Outcome]) -> _IrtOutcome:
        cfg = self.config
        pattern, answered = _irt_pattern(items, outcomes, cfg)
        if answered < cfg.min_items_for_irt:
            return _IrtOutcome(None, "insufficient_items")

        try:
            est = irt.estimate_theta(
                pattern,
                theta0=cfg.initial_theta,
                theta_min=cfg.theta_min,
                theta_max=cfg.theta_max,
                max_iterations=cfg.max_iterations,
                epsilon=cfg.convergence_epsilon,
            )
        except NonConvergent as exc:
            log.warning("irt degraded to fallback: %s (last theta=%s)", exc, exc.theta)
            return _IrtOutcome(None, "non_convergent", exc.iterations, False)
        except NumericGuard as exc:
            log.warning("irt degraded to fallback: %s", exc)
            return _IrtOutcome(None, "numeric_guard", exc.iterations, False)

        if not (math.isfinite(est.theta) and math.isfinite(est.standard_error)):
            log.warning("irt degraded to fallback: non-finite estimate")
            return _IrtOutcome(None, "numeric_guard", est.iterations, False)

        # all-correct / all-wrong patterns settle on a clamp bound; keep their SE as-is
        saturated = len({u for u, _, _, _ in pattern}) == 1
        if not saturated and est.standard_error > cfg.se_ceiling:
            log.warning(
                "irt degraded to fallback: se %.3f above ceiling %.3f", est.standard_error, cfg.se_ceiling
            )
            band = irt.se_band(
                pattern,
                est.theta,
                se_ceiling=cfg.se_ceiling,
                theta_min=cfg.theta_min,
                theta_max=cfg.theta_max,
            )
            return _IrtOutcome(None, "se_ceiling", est.iterations, est.converged, band)
        return _IrtOutcome(est, None, est.iterations, est.converged)


def score(
    responses: Iterable[Response],
    items: Iterable[Item],
    config: Optional[ScoringConfig] = None,
    transform: Optional[ThetaTransform] = None,
) -> ScoringResult:
    """Score one attempt. Raises :class:`InvalidInput` for caller errors only."""

    return ScoringEngine(config, transform).score(responses, items)

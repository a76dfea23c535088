from __future__ import annotations
import math, os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import InvalidInput


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


# Probability clamp used before any division by P or 1-P.
PROB_EPS: float = 1e-6

# Percentile display uses the normal-ogive scaling constant.
PERCENTILE_SLOPE: float = 1.7

PASSING_GRADE_DEFAULT: float = 65.0

# (lower bound in percent of score_max, label); first match wins.
PERFORMANCE_BANDS: tuple[tuple[float, str], ...] = (
    (85.0, "Sangat Baik"),
    (70.0, "Baik"),
    (55.0, "Cukup"),
    (0.0, "Perlu Peningkatan"),
)

# Category codes stored on questions -> display labels.
TOPIC_LABELS: dict[str, str] = {
    "biologi": "Biologi",
    "kimia": "Kimia",
    "fisika": "Fisika",
    "matematika": "Matematika",
    "penmat": "Matematika",
    "pm": "Matematika",
    "kpu": "Penalaran Umum",
    "ppu": "Penalaran Umum",
    "kmbm": "Literasi",
    "pbm": "Literasi",
    "pk": "Kuantitatif",
    "pbi": "Umum",
}

WEIGHTED_SCHEMES: tuple[str, ...] = ("discrimination", "difficulty", "combined")
SCORE_TRANSFORMS: tuple[str, ...] = ("linear", "logistic")

BANK_MIN_PER_TOPIC: int = 5
BANK_MIN_IRT_RATIO: float = 0.8

DEBUG_TRACE: bool = False
EXPORT_ENABLED: bool = True
TRACE_FIELDS: tuple[str, ...] = (
    "iteration",
    "theta_before",
    "theta_after",
    "gradient",
    "information",
)

# Newton steps are capped, then halved while they lower the log-likelihood.
THETA_MAX_STEP: float = 1.0
LINE_SEARCH_HALVINGS: int = 12
# Grid cells scanned across thetaRange when bracketing the SE-ceiling edges.
SE_BAND_GRID: int = 160

# // env overrides for staging/ops; defaults remain conservative.
DEBUG_TRACE = _env_bool("DEBUG_TRACE", DEBUG_TRACE)
EXPORT_ENABLED = _env_bool("EXPORT_ENABLED", EXPORT_ENABLED)
PASSING_GRADE_DEFAULT = _env_float("PASSING_GRADE", PASSING_GRADE_DEFAULT)


# camelCase option names accepted by ScoringConfig.from_mapping.
_ALIASES: dict[str, str] = {
    "minItemsForIRT": "min_items_for_irt",
    "maxIterations": "max_iterations",
    "convergenceEpsilon": "convergence_epsilon",
    "thetaRange": "theta_range",
    "defaultGuessing": "default_guessing",
    "seCeiling": "se_ceiling",
    "seStandardDeviation": "se_ceiling",
    "initialTheta": "initial_theta",
    "scoreMax": "score_max",
    "scoreTransform": "score_transform",
    "weightedScheme": "weighted_scheme",
    "minWeightedCoverage": "min_weighted_coverage",
}


@dataclass(frozen=True)
class ScoringConfig:
    """Tunables for one scoring call. All fields have working defaults."""

    min_items_for_irt: int = 5
    max_iterations: int = 25
    convergence_epsilon: float = 0.001
    theta_range: Tuple[float, float] = (-4.0, 4.0)
    default_guessing: float = 0.25
    se_ceiling: float = 2.0
    initial_theta: float = 0.0
    score_max: float = 100.0
    score_transform: str = "linear"
    weighted_scheme: str = "discrimination"
    min_weighted_coverage: float = 0.3

    @property
    def theta_min(self) -> float:
        return float(self.theta_range[0])

    @property
    def theta_max(self) -> float:
        return float(self.theta_range[1])

    def validate(self) -> "ScoringConfig":
        if int(self.min_items_for_irt) < 1:
            raise InvalidInput("minItemsForIRT must be >= 1")
        if int(self.max_iterations) <= 0:
            raise InvalidInput("maxIterations must be > 0")
        if not _finite(self.convergence_epsilon) or self.convergence_epsilon <= 0:
            raise InvalidInput("convergenceEpsilon must be a positive number")
        try:
            lo, hi = self.theta_range
        except (TypeError, ValueError):
            raise InvalidInput("thetaRange must be a [min, max] pair") from None
        if not (_finite(lo) and _finite(hi)) or lo >= hi:
            raise InvalidInput("thetaRange must satisfy min < max")
        if not _finite(self.initial_theta):
            raise InvalidInput("initialTheta must be a finite number")
        if not _finite(self.default_guessing) or not (0.0 <= self.default_guessing < 1.0):
            raise InvalidInput("defaultGuessing must be in [0, 1)")
        if not _finite(self.se_ceiling) or self.se_ceiling <= 0:
            raise InvalidInput("seCeiling must be a positive number")
        if not _finite(self.score_max) or self.score_max <= 0:
            raise InvalidInput("scoreMax must be a positive number")
        if self.score_transform not in SCORE_TRANSFORMS:
            raise InvalidInput(f"scoreTransform must be one of {', '.join(SCORE_TRANSFORMS)}")
        if self.weighted_scheme not in WEIGHTED_SCHEMES:
            raise InvalidInput(f"weightedScheme must be one of {', '.join(WEIGHTED_SCHEMES)}")
        if not _finite(self.min_weighted_coverage) or not (0.0 <= self.min_weighted_coverage <= 1.0):
            raise InvalidInput("minWeightedCoverage must be in [0, 1]")
        return self

    def with_overrides(self, overrides: Optional[Mapping[str, Any]]) -> "ScoringConfig":
        if not overrides:
            return self
        known = {f.name for f in fields(self)}
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise InvalidInput(f"unknown scoring option: {key}")
            if name == "theta_range":
                try:
                    value = (float(value[0]), float(value[1]))
                except (TypeError, ValueError, IndexError, KeyError):
                    raise InvalidInput("thetaRange must be a [min, max] pair") from None
            else:
                kind = type(getattr(self, name))
                if kind is int and isinstance(value, float) and not value.is_integer():
                    raise InvalidInput(f"{key} must be a whole number")
                try:
                    value = kind(value)
                except (TypeError, ValueError, OverflowError):
                    raise InvalidInput(f"{key} must be {kind.__name__}") from None
            changes[name] = value
        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]] = None) -> "ScoringConfig":
        return cls().with_overrides(data).validate()

    @classmethod
    def from_env(cls) -> "ScoringConfig":
        base = cls()
        return replace(
            base,
            min_items_for_irt=_env_int("TRYOUT_MIN_ITEMS_FOR_IRT", base.min_items_for_irt),
            max_iterations=_env_int("TRYOUT_MAX_ITERATIONS", base.max_iterations),
            convergence_epsilon=_env_float("TRYOUT_CONVERGENCE_EPSILON", base.convergence_epsilon),
            theta_range=(
                _env_float("TRYOUT_THETA_MIN", base.theta_min),
                _env_float("TRYOUT_THETA_MAX", base.theta_max),
            ),
            default_guessing=_env_float("TRYOUT_DEFAULT_GUESSING", base.default_guessing),
            se_ceiling=_env_float("TRYOUT_SE_CEILING", base.se_ceiling),
            score_max=_env_float("TRYOUT_SCORE_MAX", base.score_max),
            score_transform=_env_str("TRYOUT_SCORE_TRANSFORM", base.score_transform),
            weighted_scheme=_env_str("TRYOUT_WEIGHTED_SCHEME", base.weighted_scheme),
        ).validate()


def _finite(x: Any) -> bool:
    try:
        return math.isfinite(float(x))
    except (TypeError, ValueError):
        return False

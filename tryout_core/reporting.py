# tryout_core/reporting.py
from __future__ import annotations
import json, math
from pathlib import Path
from typing import Any, Dict, Optional

from .config import PASSING_GRADE_DEFAULT
from .types import ScoringResult


# -------- utils: make any object JSON-safe ----------
def _to_basic(x: Any) -> Any:
    if x is None or isinstance(x, (bool, int, str)):
        return x
    if isinstance(x, float):
        return x if math.isfinite(x) else None
    if isinstance(x, dict):
        return {str(k): _to_basic(v) for k, v in x.items()}
    if isinstance(x, (list, tuple, set)):
        return [_to_basic(v) for v in x]
    if hasattr(x, "to_dict"):
        return _to_basic(x.to_dict())
    if hasattr(x, "__dict__"):
        return _to_basic(vars(x))
    return str(x)


def to_record(result: ScoringResult, passing_grade: Optional[float] = None, score_max: float = 100.0) -> Dict[str, Any]:
    """Flat, JSON-safe record for the results table and the result page.

    ``isPassed`` compares the score, as a percentage of ``score_max``, with
    the programme's passing grade.
    """
    grade = PASSING_GRADE_DEFAULT if passing_grade is None else float(passing_grade)
    record = _to_basic(result)
    pct = float(result.final_score) / float(score_max) * 100.0
    record["passingGrade"] = grade
    record["isPassed"] = pct >= grade
    return record


def write_record(record: Dict[str, Any], out_path: str) -> str:
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(_to_basic(record), f, ensure_ascii=False, indent=2)
    return str(out)

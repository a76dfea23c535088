from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple
Method = Literal["irt", "weighted", "simple"]
Outcome = Literal["correct", "wrong", "unanswered"]
DEFAULT_TOPIC = "General"
@dataclass(frozen=True)
class Item:
    id: str
    correct_answer: Optional[str]
    difficulty: Optional[float] = None
    discrimination: Optional[float] = None
    guessing: Optional[float] = None
    topic: Optional[str] = None

    @property
    def topic_label(self) -> str:
        t = (self.topic or "").strip()
        return t or DEFAULT_TOPIC
@dataclass(frozen=True)
class Response:
    item_id: str
    selected_option: Optional[str] = None
@dataclass(frozen=True)
class Statistics:
    correct: int
    wrong: int
    unanswered: int
    total_questions: int
    accuracy: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correct": self.correct,
            "wrong": self.wrong,
            "unanswered": self.unanswered,
            "totalQuestions": self.total_questions,
            "accuracy": self.accuracy,
        }
@dataclass(frozen=True)
class TopicStat:
    topic: str
    correct: int
    wrong: int
    unanswered: int
    total: int
    percentage: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "correct": self.correct,
            "wrong": self.wrong,
            "unanswered": self.unanswered,
            "total": self.total,
            "percentage": self.percentage,
        }
@dataclass(frozen=True)
class ScoringResult:
    method: Method
    final_score: int
    statistics: Statistics
    topic_analysis: Tuple[TopicStat, ...]
    performance_level: str
    theta: Optional[float] = None
    standard_error: Optional[float] = None
    percentile: Optional[int] = None
    iterations: Optional[int] = None
    converged: Optional[bool] = None
    fallback_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Flat camelCase record; theta/SE/percentile only for ``irt``."""
        out: Dict[str, Any] = {
            "method": self.method,
            "finalScore": self.final_score,
            "statistics": self.statistics.to_dict(),
            "topicAnalysis": [t.to_dict() for t in self.topic_analysis],
            "performanceLevel": self.performance_level,
        }
        if self.method == "irt":
            out["theta"] = self.theta
            out["standardError"] = self.standard_error
            out["percentile"] = self.percentile
        diag: Dict[str, Any] = {}
        if self.iterations is not None:
            diag["iterations"] = self.iterations
        if self.converged is not None:
            diag["converged"] = self.converged
        if self.fallback_reason:
            diag["fallbackReason"] = self.fallback_reason
        out["diagnostics"] = diag
        return out
@dataclass(frozen=True)
class ThetaEstimate:
    theta: float
    standard_error: float
    information: float
    iterations: int
    converged: bool = True
    history: List[float] = field(default_factory=list, compare=False)

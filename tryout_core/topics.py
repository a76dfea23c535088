from __future__ import annotations
from collections import OrderedDict
from typing import Dict, Iterable, List, Tuple

from .levels import round_half_up
from .types import Item, Outcome, TopicStat


def analyze_topics(items: Iterable[Item], outcomes: Dict[str, Outcome]) -> Tuple[TopicStat, ...]:
    """Per-topic tallies, best topic first, ties by name."""
    buckets: "OrderedDict[str, Dict[str, int]]" = OrderedDict()
    for it in items:
        row = buckets.setdefault(it.topic_label, {"correct": 0, "wrong": 0, "unanswered": 0, "total": 0})
        row[outcomes[it.id]] += 1
        row["total"] += 1

    out: List[TopicStat] = []
    for topic, row in buckets.items():
        pct = round_half_up(row["correct"] / row["total"] * 100) if row["total"] else 0
        out.append(
            TopicStat(
                topic=topic,
                correct=row["correct"],
                wrong=row["wrong"],
                unanswered=row["unanswered"],
                total=row["total"],
                percentage=pct,
            )
        )
    out.sort(key=lambda t: (-t.percentage, t.topic))
    return tuple(out)

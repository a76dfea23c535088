"""Helpers to export per-topic analysis in JSON/CSV formats."""
from __future__ import annotations

from typing import Iterable, List, Dict, Any
import csv
import io

_FIELDS: tuple[str, ...] = (
    "topic",
    "correct",
    "wrong",
    "unanswered",
    "total",
    "percentage",
)


def _normalize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key in _FIELDS:
        val = row.get(key)
        if key == "topic":
            out[key] = "" if val is None else str(val)
            continue
        try:
            out[key] = int(val)
        except (TypeError, ValueError):
            out[key] = 0
    return out


def to_json(rows: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a JSON-safe payload for topic export."""

    normalized: List[Dict[str, Any]] = [_normalize_row(r or {}) for r in rows]
    return {"topics": normalized}


def to_csv(rows: Iterable[Dict[str, Any]]) -> str:
    """Render topic rows as CSV with a fixed header."""

    normalized = [_normalize_row(r or {}) for r in rows]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_FIELDS)
    writer.writeheader()
    for row in normalized:
        writer.writerow(row)
    return buf.getvalue()


__all__ = ["to_json", "to_csv"]

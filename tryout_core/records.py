"""Turn stored question/answer rows into engine values.

Question rows come from the tryout tables, where the same field has been
written under several names over time (``difficulty`` by the question editor,
``irt_difficulty`` by the calibration import, ``topik``/``kategori``/
``kategori_id`` for the grouping label).  Nothing here validates ids; the
engine does that.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from .config import TOPIC_LABELS
from .types import Item, Response

_ID_KEYS = ("id", "question_id", "item_id")
_KEY_KEYS = ("correct_answer", "jawaban_benar", "answer_key")
_B_KEYS = ("difficulty", "irt_difficulty")
_A_KEYS = ("discrimination", "irt_discrimination")
_C_KEYS = ("guessing", "irt_guessing")
_TOPIC_KEYS = ("topic", "topik", "kategori", "kategori_id")
_CHOICE_KEYS = ("selected_option", "selected_answer", "answer", "jawaban")


def _first(row: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for k in keys:
        v = row.get(k)
        if v is not None and v != "":
            return v
    return None


def _ident(row: Mapping[str, Any], keys: Iterable[str]) -> str:
    value = _first(row, keys)
    return "" if value is None else str(value)


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def normalize_topic(raw: Any) -> Optional[str]:
    """Map category codes (``penmat``, ``kpu`` ...) to display labels."""
    text = _to_text(raw)
    if text is None:
        return None
    return TOPIC_LABELS.get(text.lower(), text)


def item_from_record(row: Mapping[str, Any]) -> Item:
    return Item(
        id=_ident(row, _ID_KEYS),
        correct_answer=_to_text(_first(row, _KEY_KEYS)),
        difficulty=_to_float(_first(row, _B_KEYS)),
        discrimination=_to_float(_first(row, _A_KEYS)),
        guessing=_to_float(_first(row, _C_KEYS)),
        topic=normalize_topic(_first(row, _TOPIC_KEYS)),
    )


def items_from_records(rows: Iterable[Mapping[str, Any]]) -> List[Item]:
    return [item_from_record(r) for r in rows]


def response_from_record(row: Mapping[str, Any]) -> Response:
    return Response(
        item_id=_ident(row, ("item_id", "question_id", "id")),
        selected_option=_to_text(_first(row, _CHOICE_KEYS)),
    )


def responses_from_answers(answers: Mapping[str, Any]) -> List[Response]:
    """``{question_id: chosen option}`` as kept by the exam session."""
    return [Response(item_id=str(qid), selected_option=_to_text(v)) for qid, v in answers.items()]


def responses_from_payload(payload: Mapping[str, Any]) -> List[Response]:
    if isinstance(payload.get("answers"), Mapping):
        return responses_from_answers(payload["answers"])
    return [response_from_record(r) for r in payload.get("responses") or []]


def load_attempt(path: str | Path) -> Tuple[List[Item], List[Response], dict]:
    """Read ``{"items": [...], "answers"|"responses": ..., "config": {...}}`` from disk."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    items = items_from_records(data.get("items") or [])
    return items, responses_from_payload(data), dict(data.get("config") or {})

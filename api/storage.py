"""Result store for scored attempts.

Each scored record is one JSON file under ``DATA_DIR/reports``.  A single
index file keeps two maps::

    {"reports": {report_id: summary}, "sessions": {session_id: report_id}}

so a session always resolves to its latest rescore and a user's history can
be listed without opening every record.  Swap this module for the hosted
database in production.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()
REPORTS_DIR = DATA_ROOT / "reports"
REPORT_INDEX_PATH = DATA_ROOT / "reports_index.json"

# report fields copied into the index for listings
SUMMARY_FIELDS = ("sessionId", "userId", "createdAt", "method", "finalScore", "performanceLevel")

_LOCK = threading.Lock()

log = logging.getLogger(__name__)

Index = Dict[str, Dict[str, Any]]


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _report_path(report_id: str) -> Path:
    return REPORTS_DIR / f"{report_id}.json"


def _load_index() -> Index:
    if not REPORT_INDEX_PATH.exists():
        return {"reports": {}, "sessions": {}}
    try:
        raw = json.loads(REPORT_INDEX_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.warning("report index unreadable, starting empty: %s", exc)
        return {"reports": {}, "sessions": {}}
    return {"reports": dict(raw.get("reports") or {}), "sessions": dict(raw.get("sessions") or {})}


def _dump(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)


def summarize(report: Dict[str, Any]) -> Dict[str, Any]:
    meta = report.get("meta") or {}
    merged = {**report, **meta}
    return {k: merged.get(k) for k in SUMMARY_FIELDS}


def save_report(report_id: str, report: Dict[str, Any]) -> Optional[str]:
    """Write ``report`` and point its session at it.

    Returns the id of the report it replaced for the same session, if any;
    that record is removed from disk.
    """

    _dump(_report_path(report_id), report)
    summary = summarize(report)
    replaced: Optional[str] = None
    with _LOCK:
        index = _load_index()
        sid = summary.get("sessionId")
        if sid:
            previous = index["sessions"].get(sid)
            if previous and previous != report_id:
                index["reports"].pop(previous, None)
                replaced = previous
            index["sessions"][sid] = report_id
        index["reports"][report_id] = summary
        _dump(REPORT_INDEX_PATH, index)

    if replaced:
        _report_path(replaced).unlink(missing_ok=True)
        log.info("session %s rescored: report %s replaces %s", sid, report_id, replaced)
    return replaced


def load_report(report_id: str) -> Optional[Dict[str, Any]]:
    path = _report_path(report_id)
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.warning("report %s unreadable: %s", report_id, exc)
        return None


def delete_report(report_id: str) -> bool:
    with _LOCK:
        index = _load_index()
        summary = index["reports"].pop(report_id, None)
        if summary is not None:
            sid = summary.get("sessionId")
            if sid and index["sessions"].get(sid) == report_id:
                index["sessions"].pop(sid, None)
            _dump(REPORT_INDEX_PATH, index)
    _report_path(report_id).unlink(missing_ok=True)
    return summary is not None


def list_reports_for_user(user_id: str) -> List[Dict[str, Any]]:
    """Summaries of a user's reports, newest first."""
    reports = _load_index()["reports"]
    out = [{"id": rid, **summary} for rid, summary in reports.items() if summary.get("userId") == user_id]
    out.sort(key=lambda r: r.get("createdAt") or "", reverse=True)
    return out


def find_report_by_session(session_id: str) -> Optional[Dict[str, Any]]:
    report_id = _load_index()["sessions"].get(session_id)
    if not report_id:
        return None
    return load_report(report_id)

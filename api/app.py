from __future__ import annotations
from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import logging, os, uuid, typing as t

# ---- Engine imports ----
from tryout_core.audit_export import to_csv as topics_to_csv, to_json as topics_to_json
from tryout_core.config import EXPORT_ENABLED, ScoringConfig
from tryout_core.engine import score
from tryout_core.errors import InvalidInput
from tryout_core.records import items_from_records, responses_from_answers
from tryout_core.reporting import to_record
from tryout_core.types import Response as AnswerResponse
from .storage import (
    delete_report,
    find_report_by_session,
    list_reports_for_user,
    load_report,
    save_report,
    utcnow_iso,
)

log = logging.getLogger(__name__)

BASE_CONFIG = ScoringConfig.from_env()

app = FastAPI(title="Tryout Scoring API")


@app.get("/")
def root():
    return {"status": "ok", "service": "tryout-scoring-api"}


ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)


# ---- Schemas ----
class ResponseIn(BaseModel):
    item_id: str
    selected_option: str | None = None


class ScoreReq(BaseModel):
    session_id: str | None = None
    user_id: str | None = None
    items: list[dict[str, t.Any]]
    answers: dict[str, str | None] | None = None   # question_id -> chosen option
    responses: list[ResponseIn] | None = None
    options: dict[str, t.Any] | None = None   # scoring overrides, e.g. {"minItemsForIRT": 5}
    passing_grade: float | None = None


# ---- Helpers ----
def _decorate_report(
    base: dict[str, t.Any],
    *,
    session_id: str | None,
    user_id: str | None,
) -> dict[str, t.Any]:
    rid = str(uuid.uuid4())
    created = utcnow_iso()
    report = dict(base)
    meta = dict(report.get("meta") or {})
    if session_id:
        meta["sessionId"] = session_id
    if user_id:
        meta["userId"] = user_id
    meta["createdAt"] = created
    meta["reportId"] = rid
    report["meta"] = meta
    report["id"] = rid
    report["reportId"] = rid
    report["created_at"] = created
    return report


def _responses(req: ScoreReq) -> list[AnswerResponse]:
    if req.answers is not None:
        return responses_from_answers(req.answers)
    return [AnswerResponse(item_id=r.item_id, selected_option=r.selected_option) for r in req.responses or []]


def _topic_rows(report_id: str) -> list[dict[str, t.Any]]:
    if not EXPORT_ENABLED:
        raise HTTPException(404, "export disabled")
    report = load_report(report_id)
    if not report:
        raise HTTPException(404, "report not found")
    return list(report.get("topicAnalysis") or [])


# ---- Health ----
@app.get("/health")
def health():
    return {
        "status": "ok",
        "config": {
            "minItemsForIRT": BASE_CONFIG.min_items_for_irt,
            "maxIterations": BASE_CONFIG.max_iterations,
            "thetaRange": list(BASE_CONFIG.theta_range),
            "scoreMax": BASE_CONFIG.score_max,
            "scoreTransform": BASE_CONFIG.score_transform,
        },
    }


# ---- Scoring ----
@app.post("/irt/score")
def score_attempt(req: ScoreReq):
    try:
        cfg = BASE_CONFIG.with_overrides(req.options).validate()
        result = score(_responses(req), items_from_records(req.items), cfg)
    except InvalidInput as exc:
        raise HTTPException(400, str(exc))

    record = to_record(result, passing_grade=req.passing_grade, score_max=cfg.score_max)
    report = _decorate_report(record, session_id=req.session_id, user_id=req.user_id)
    if req.session_id:
        save_report(report["id"], report)
    log.info("scored session=%s method=%s score=%s", req.session_id, result.method, result.final_score)
    return report


@app.get("/irt/report/{session_id}")
def session_report(session_id: str):
    stored = find_report_by_session(session_id)
    if not stored:
        raise HTTPException(404, "report not found")
    return stored


# ---- Reports ----
@app.get("/reports/{report_id}")
def get_report(report_id: str):
    report = load_report(report_id)
    if not report:
        raise HTTPException(404, "report not found")
    return report


@app.get("/reports/{report_id}/topics.json")
def get_topics_json(report_id: str):
    return {"result_id": report_id, **topics_to_json(_topic_rows(report_id))}


@app.get("/reports/{report_id}/topics.csv")
def get_topics_csv(report_id: str):
    body = topics_to_csv(_topic_rows(report_id))
    filename = f"{report_id}_topics.csv"
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
    )


@app.delete("/reports/{report_id}")
def delete_report_endpoint(report_id: str):
    ok = delete_report(report_id)
    if not ok:
        raise HTTPException(404, "report not found")
    return {"ok": True}


@app.get("/users/{user_id}/reports")
def list_reports(user_id: str):
    reports = list_reports_for_user(user_id)
    return {"reports": reports}

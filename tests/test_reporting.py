from __future__ import annotations

import json

from tryout_core import audit_export
from tryout_core.engine import score
from tryout_core.reporting import to_record, write_record

from tests.conftest import answer, build_items


def test_record_is_json_safe_and_flags_passing(flat_items):
    res = score(answer(flat_items, 8), flat_items)

    record = to_record(res, passing_grade=60)
    assert record["isPassed"] is True
    assert record["passingGrade"] == 60.0
    assert record["method"] == "irt"
    assert record["standardError"] > 0
    json.dumps(record)

    assert to_record(res, passing_grade=70)["isPassed"] is False


def test_default_passing_grade_applies():
    items = build_items(4, difficulty=None)
    record = to_record(score(answer(items, 2), items))
    assert record["passingGrade"] == 65.0
    assert record["isPassed"] is False


def test_write_record(tmp_path, flat_items):
    record = to_record(score(answer(flat_items, 5), flat_items))
    out = write_record(record, str(tmp_path / "nested" / "r.json"))
    assert json.loads(open(out, encoding="utf-8").read())["finalScore"] == record["finalScore"]


def test_topic_csv_has_fixed_header():
    rows = [
        {"topic": "Kimia", "correct": 3, "wrong": 1, "unanswered": 0, "total": 4, "percentage": 75},
        {"topic": None, "correct": "x"},
    ]
    text = audit_export.to_csv(rows)
    lines = text.strip().splitlines()
    assert lines[0] == "topic,correct,wrong,unanswered,total,percentage"
    assert lines[1] == "Kimia,3,1,0,4,75"
    assert lines[2] == ",0,0,0,0,0"

    payload = audit_export.to_json(rows)
    assert payload["topics"][1]["correct"] == 0

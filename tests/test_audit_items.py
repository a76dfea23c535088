from __future__ import annotations

import json

import tryout_core.audit_items as audit_items
from tryout_core import config
from tryout_core.types import Item

from tests.conftest import build_items


def test_audit_flags_sparse_and_uncalibrated_topics(monkeypatch):
    monkeypatch.setattr(config, "BANK_MIN_PER_TOPIC", 3, raising=False)
    items = build_items(3, prefix="k", topic="Kimia") + build_items(3, prefix="f", topic="Fisika", difficulty=None)

    summary = audit_items.audit_items(items)
    assert summary["coverage"]["Kimia"]["irt_ready"] == 3
    assert summary["coverage"]["Fisika"]["missing_difficulty"] == 3
    joined = "\n".join(summary["warnings"])
    assert "Fisika IRT-ready 0/3" in joined
    assert "Kimia" not in joined


def test_audit_counts_bad_parameters(monkeypatch):
    monkeypatch.setattr(config, "BANK_MIN_PER_TOPIC", 0, raising=False)
    items = [
        Item(id="a", correct_answer="A", difficulty=0.0, discrimination=-1.0, topic="T"),
        Item(id="b", correct_answer=None, difficulty=0.0, guessing=1.2, topic="T"),
    ]
    summary = audit_items.audit_items(items)
    row = summary["coverage"]["T"]
    assert row["bad_discrimination"] == 1
    assert row["bad_guessing"] == 1
    assert row["missing_key"] == 1
    assert summary["totals"]["irt_ready"] == 0


def test_main_returns_warning_exit(tmp_path, capsys):
    rows = [{"id": f"q{i}", "jawaban_benar": "A", "topik": "kpu"} for i in range(2)]
    src = tmp_path / "items.json"
    src.write_text(json.dumps({"items": rows}), encoding="utf-8")
    out = tmp_path / "audit.json"

    exit_code = audit_items.main([str(src), "--out", str(out)])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "Penalaran Umum" in captured.out
    assert json.loads(out.read_text(encoding="utf-8"))["totals"]["total"] == 2

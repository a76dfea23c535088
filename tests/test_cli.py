from __future__ import annotations

import json

from tryout_core.cli import main


def _attempt(tmp_path, answers: dict) -> str:
    payload = {
        "items": [
            {"id": f"q{i:02d}", "jawaban_benar": "A", "irt_difficulty": 0.0, "topik": "pk"} for i in range(10)
        ],
        "answers": answers,
    }
    path = tmp_path / "attempt.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_cli_prints_record(tmp_path, capsys):
    answers = {f"q{i:02d}": ("A" if i < 8 else "B") for i in range(10)}
    out = tmp_path / "result.json"

    code = main([_attempt(tmp_path, answers), "--passing-grade", "60", "--out", str(out)])
    record = json.loads(capsys.readouterr().out)

    assert code == 0
    assert record["method"] == "irt"
    assert record["statistics"]["correct"] == 8
    assert record["topicAnalysis"][0]["topic"] == "Kuantitatif"
    assert record["isPassed"] is True
    assert json.loads(out.read_text(encoding="utf-8")) == record


def test_cli_rejects_unknown_question(tmp_path, capsys):
    code = main([_attempt(tmp_path, {"zz": "A"})])
    assert code == 1
    assert "unknown item" in capsys.readouterr().err

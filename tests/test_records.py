from __future__ import annotations

import json

from tryout_core.engine import score
from tryout_core.records import (
    item_from_record,
    load_attempt,
    normalize_topic,
    responses_from_answers,
    responses_from_payload,
)


def test_item_aliases_from_question_table():
    item = item_from_record(
        {
            "id": 17,
            "jawaban_benar": "c",
            "irt_difficulty": "0.75",
            "irt_discrimination": 1.4,
            "kategori_id": "penmat",
        }
    )
    assert item.id == "17"
    assert item.correct_answer == "c"
    assert item.difficulty == 0.75
    assert item.discrimination == 1.4
    assert item.guessing is None
    assert item.topic == "Matematika"


def test_editor_difficulty_wins_over_import_alias():
    item = item_from_record({"id": "a", "correct_answer": "A", "difficulty": -1, "irt_difficulty": 2})
    assert item.difficulty == -1.0


def test_non_numeric_parameters_become_missing():
    item = item_from_record({"id": "a", "correct_answer": "A", "difficulty": "hard", "irt_guessing": True})
    assert item.difficulty is None
    assert item.guessing is None


def test_topic_labels():
    assert normalize_topic("KPU") == "Penalaran Umum"
    assert normalize_topic("Sejarah") == "Sejarah"
    assert normalize_topic("  ") is None
    assert item_from_record({"id": "x", "topik": "pbm"}).topic_label == "Literasi"
    assert item_from_record({"id": "x"}).topic_label == "General"


def test_answer_map_marks_blank_as_unanswered():
    responses = responses_from_answers({"q1": "A", "q2": "", "q3": None})
    assert [(r.item_id, r.selected_option) for r in responses] == [("q1", "A"), ("q2", None), ("q3", None)]


def test_response_rows_accept_store_field_names():
    responses = responses_from_payload(
        {"responses": [{"question_id": "q1", "selected_answer": "B"}, {"item_id": "q2"}]}
    )
    assert [(r.item_id, r.selected_option) for r in responses] == [("q1", "B"), ("q2", None)]


def test_load_attempt_round_trip(tmp_path):
    payload = {
        "items": [{"id": f"q{i}", "jawaban_benar": "A", "topik": "kimia"} for i in range(4)],
        "answers": {"q0": "A", "q1": "A", "q2": "D"},
        "config": {"minItemsForIRT": 3},
    }
    path = tmp_path / "attempt.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    items, responses, overrides = load_attempt(path)
    assert overrides == {"minItemsForIRT": 3}

    res = score(responses, items)
    assert res.method == "simple"
    assert res.final_score == 50
    assert res.topic_analysis[0].topic == "Kimia"


def test_zero_ids_survive_conversion():
    item = item_from_record({"id": 0, "correct_answer": "A"})
    assert item.id == "0"
    responses = responses_from_payload({"responses": [{"question_id": 0, "answer": "A"}]})
    assert responses[0].item_id == "0"
    assert score(responses, [item]).statistics.correct == 1

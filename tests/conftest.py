from __future__ import annotations

import pytest

from tryout_core.types import Item, Response


def build_items(
    n: int = 10,
    *,
    prefix: str = "q",
    topic: str | None = "math",
    difficulty: float | None = 0.0,
    discrimination: float | None = 1.0,
    guessing: float | None = 0.25,
    key: str = "A",
) -> list[Item]:
    """Deterministic item set; ids sort in creation order."""

    return [
        Item(
            id=f"{prefix}{idx:02d}",
            correct_answer=key,
            difficulty=difficulty,
            discrimination=discrimination,
            guessing=guessing,
            topic=topic,
        )
        for idx in range(n)
    ]


def answer(items: list[Item], n_correct: int, *, unanswered: int = 0) -> list[Response]:
    """First ``n_correct`` items right, the last ``unanswered`` skipped, the rest wrong."""

    out: list[Response] = []
    for idx, it in enumerate(items):
        if idx >= len(items) - unanswered:
            continue
        choice = it.correct_answer if idx < n_correct else "B"
        out.append(Response(item_id=it.id, selected_option=choice))
    return out


@pytest.fixture
def flat_items() -> list[Item]:
    return build_items()

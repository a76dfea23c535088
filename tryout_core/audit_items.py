from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from . import config
from .records import items_from_records
from .scoring import irt_params
from .types import Item


def _blank_topic() -> dict[str, int]:
    return {
        "total": 0,
        "irt_ready": 0,
        "missing_difficulty": 0,
        "bad_discrimination": 0,
        "bad_guessing": 0,
        "missing_key": 0,
    }


def audit_items(items: Iterable[Item], cfg: config.ScoringConfig | None = None) -> dict[str, object]:
    cfg = cfg or config.ScoringConfig()
    coverage: dict[str, dict[str, int]] = {}
    totals = _blank_topic()

    for item in items:
        row = coverage.setdefault(item.topic_label, _blank_topic())
        flags = {"total": 1}
        if irt_params(item, cfg) is not None:
            flags["irt_ready"] = 1
        if item.difficulty is None:
            flags["missing_difficulty"] = 1
        if item.discrimination is not None and not (item.discrimination > 0):
            flags["bad_discrimination"] = 1
        if item.guessing is not None and not (0.0 <= item.guessing < 1.0):
            flags["bad_guessing"] = 1
        if not item.correct_answer:
            flags["missing_key"] = 1
        for key, n in flags.items():
            row[key] += n
            totals[key] += n

    warnings: list[str] = []
    for topic in sorted(coverage):
        data = coverage[topic]
        if data["total"] < config.BANK_MIN_PER_TOPIC:
            warnings.append(f"{topic} has {data['total']} items (<{config.BANK_MIN_PER_TOPIC})")
        ratio = data["irt_ready"] / data["total"]
        if ratio < config.BANK_MIN_IRT_RATIO:
            warnings.append(
                f"{topic} IRT-ready {data['irt_ready']}/{data['total']} (<{config.BANK_MIN_IRT_RATIO:.0%})"
            )
        if data["missing_key"]:
            warnings.append(f"{topic} has {data['missing_key']} items without an answer key")

    return {"coverage": coverage, "warnings": warnings, "totals": totals}


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[str, dict[str, int]] = summary["coverage"]  # type: ignore[assignment]
    print("=== Item Calibration Coverage ===")
    for topic in sorted(coverage):
        data = coverage[topic]
        print(
            f"{topic:<20} total={data['total']:3d} irt_ready={data['irt_ready']:3d} "
            f"no_b={data['missing_difficulty']:3d} bad_a={data['bad_discrimination']:3d} "
            f"bad_c={data['bad_guessing']:3d}"
        )

    warnings: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")
    print("\nTotals:", summary["totals"])


def write_summary(summary: dict[str, object], path: Path) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text + "\n", encoding="utf-8")
    return text


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Audit IRT calibration coverage of a question export.")
    ap.add_argument("items", help="JSON file: a list of question rows, or {\"items\": [...]}")
    ap.add_argument("--out", default=None, help="write the JSON summary here")
    args = ap.parse_args(argv)

    raw = json.loads(Path(args.items).read_text(encoding="utf-8"))
    rows = raw.get("items", []) if isinstance(raw, dict) else raw
    summary = audit_items(items_from_records(rows))
    print_report(summary)
    if args.out:
        write_summary(summary, Path(args.out))
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    raise SystemExit(main())

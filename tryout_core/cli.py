from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import ScoringConfig
from .engine import score
from .errors import InvalidInput
from .records import load_attempt
from .reporting import to_record, write_record


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="tryout-score", description="Score one tryout attempt stored as JSON.")
    ap.add_argument("attempt", help='JSON file with "items" and "answers" (or "responses")')
    ap.add_argument("--passing-grade", type=float, default=None)
    ap.add_argument("--scale", type=float, default=None, help="score_max, e.g. 1000 for the UTBK scale")
    ap.add_argument("--transform", choices=("linear", "logistic"), default=None)
    ap.add_argument("--out", default=None, help="also write the record to this path")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )

    try:
        items, responses, overrides = load_attempt(args.attempt)
        if args.scale is not None:
            overrides["score_max"] = args.scale
        if args.transform:
            overrides["score_transform"] = args.transform
        cfg = ScoringConfig.from_env().with_overrides(overrides).validate()
        result = score(responses, items, cfg)
    except InvalidInput as exc:
        print(f"invalid input: {exc}", file=sys.stderr)
        return 1

    record = to_record(result, passing_grade=args.passing_grade, score_max=cfg.score_max)
    print(json.dumps(record, ensure_ascii=False, indent=2))
    if args.out:
        write_record(record, args.out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

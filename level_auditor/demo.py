"""Simple command line demo for the level auditor."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .level import LevelLoader, build_level_model
from .logging_config import configure_logging
from .movement import MAX_HEALTH, STARTING_HEALTH
from .report import build_report, format_report
from .search import MAX_EXPANSIONS, AuditSettings, LevelAuditor


logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Audit slide-puzzle levels for solvability.")
    parser.add_argument("level", type=str, help="Path to a level JSON file")
    parser.add_argument("--starting-health", type=int, default=STARTING_HEALTH)
    parser.add_argument("--max-health", type=int, default=MAX_HEALTH)
    parser.add_argument("--max-expansions", type=int, default=MAX_EXPANSIONS)
    parser.add_argument("--json", action="store_true", help="Print the structured report")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    configure_logging(args.log_level.upper())

    level_path = Path(args.level)
    try:
        description = LevelLoader(level_path.parent).load_file(level_path)
    except FileNotFoundError:
        print(f"Level file not found: {level_path}", file=sys.stderr)
        return 2
    except json.JSONDecodeError as exc:
        print(f"Level file {level_path} is not valid JSON: {exc}", file=sys.stderr)
        return 2
    level = build_level_model(description)

    settings = AuditSettings(
        starting_health=args.starting_health,
        max_health=args.max_health,
        max_expansions=args.max_expansions,
    )
    result = LevelAuditor(settings).find_optimal_path(level)

    if args.json:
        print(json.dumps(build_report(result), indent=2, ensure_ascii=False))
    else:
        print("=== Level Audit ===")
        for line in format_report(result):
            print(line)
    logger.info(
        "%s: %s after %d states", level.name, result.outcome.value, result.states_explored
    )
    return 0 if result.solvable else 1


if __name__ == "__main__":
    raise SystemExit(main())

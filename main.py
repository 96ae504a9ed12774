"""Command line entry point for auditing a level file."""

from __future__ import annotations

from level_auditor.demo import main


if __name__ == "__main__":
    raise SystemExit(main())

#!/usr/bin/env python3
"""Run a scheduled maintenance task locally.

Usage:
    python scripts/run_scheduled_task.py cleanup [--max-age-days N]
    python scripts/run_scheduled_task.py metrics

cleanup  deletes shared configs older than CONFIG_MAX_AGE_DAYS and purges expired entries.
metrics  writes an hourly snapshot of key counts per namespace.
Exits 0 on success, 1 on failure.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from nomoji.db.session import SessionLocal
from nomoji.services.maintenance import aggregate_metrics, cleanup_old_configs


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a nomoji scheduled task")
    parser.add_argument("task", choices=["cleanup", "metrics"])
    parser.add_argument(
        "--max-age-days",
        type=int,
        default=None,
        help="Override CONFIG_MAX_AGE_DAYS (cleanup only)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    db = SessionLocal()
    try:
        if args.task == "cleanup":
            result = cleanup_old_configs(db, max_age_days=args.max_age_days)
            print(
                f"status={result['status']} "
                f"deleted_count={result['deleted_count']} "
                f"purged_count={result.get('purged_count', 0)}"
            )
        else:
            result = aggregate_metrics(db)
            print(f"status={result['status']} key={result.get('key', '')}")
        if result.get("error"):
            print(f"error={result['error']}", file=sys.stderr)
        return 0 if result["status"] == "completed" else 1
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

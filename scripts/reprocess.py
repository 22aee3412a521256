"""Reprocess attendance for a date range.

    python scripts/reprocess.py 2024-03-01 2024-03-31 [EMP001 EMP002 ...]

Without employee numbers every active employee is reprocessed.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.shift_attendance.shift_attendance.container import build_container


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Reprocess daily attendance")
    parser.add_argument("start_date")
    parser.add_argument("end_date")
    parser.add_argument("employees", nargs="*")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        utc_offset=getattr(settings, "ORG_UTC_OFFSET", "+05:30"),
        tolerance_hours=float(getattr(settings, "MATCH_TOLERANCE_HOURS", 3)),
        max_workers=int(getattr(settings, "PROCESSING_MAX_WORKERS", 4)),
        lock_timeout_seconds=float(getattr(settings, "LOCK_TIMEOUT_SECONDS", 30)),
        lock_backend=getattr(settings, "LOCK_BACKEND", "process"),
    )
    report = container.attendance_service.reprocess_batch(args.employees or None, args.start_date, args.end_date)

    print(f"processed={report.processed} failed={report.failed}")
    for err in report.errors:
        print(f"  {err.employee_number} {err.work_date.isoformat()}: {err.message}")
    return 1 if report.errors else 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Rebuild every student's attendance percentage, average marks and grade.

Run after a post-write recomputation failure was logged, or any time the stored
values are suspected to be stale. Safe to run repeatedly.
"""
from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.academic_records.academic_records.container import build_container


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    container = build_container(db_config=db_config, jwt_secret=settings.JWT_SECRET)
    report = container.metrics_service.reconcile_all()

    print(f"Checked {report.checked} student(s), {report.checked - len(report.failed)} rebuilt")
    if report.failed:
        print(f"FAILED for student ids: {', '.join(str(i) for i in report.failed)}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

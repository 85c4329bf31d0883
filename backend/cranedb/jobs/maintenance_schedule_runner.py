"""Daily maintenance-schedule job.

Intended for cron / a platform scheduler, once per day shortly after midnight
plant time:
 - create tracking rows for any crane not yet tracked this month
 - demote PENDING rows whose department window has elapsed to MISSED

Running it several times on the same day is harmless.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from typing import Optional, Sequence

from cranedb.database import WriteSessionLocal
from cranedb.logging_config import configure_logging
from cranedb.apps.maintenance_schedule import services as schedule_services

logger = logging.getLogger(__name__)


def run(as_of: Optional[date] = None) -> dict:
    """Execute the job and return a summary dict."""
    as_of = as_of or schedule_services.plant_today()
    db = WriteSessionLocal()
    try:
        initialized = schedule_services.initialize_month(db, year=as_of.year, month=as_of.month)
        swept = schedule_services.daily_maintenance(db, as_of=as_of)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Maintenance schedule job failed", extra={"as_of": as_of.isoformat()})
        raise
    finally:
        db.close()

    return {
        "date": as_of.isoformat(),
        "created_count": initialized.created_count,
        "total_cranes": initialized.total_cranes,
        "expired_departments": swept.expired_departments,
        "catchup_started": swept.catchup_started,
        "total_missed": swept.total_missed,
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Initialise the month and sweep expired maintenance windows.")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Run as of this date (YYYY-MM-DD); defaults to today in SCHEDULE_TIMEZONE.",
    )
    args = parser.parse_args(argv)

    configure_logging()
    try:
        result = run(args.date)
    except Exception:
        return 1
    print("Maintenance schedule job completed:", result)
    return 0


if __name__ == "__main__":
    sys.exit(main())

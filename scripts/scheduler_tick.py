# scripts/scheduler_tick.py
"""
Time-driven scheduler "tick".

Meant to be run once a day from cron (or any job runner):

    python -m scripts.scheduler_tick
    python -m scripts.scheduler_tick --today 2025-03-10 --force

Flow:
1. Skip if a run already completed today (unless --force).
2. Process the look-ahead window: expire past rows, pick one date per ISO
   week, write statuses.
3. Send scheduled / reminder / restriction messages through the webhook
   (if WEBHOOK_URL is configured).
"""

from __future__ import annotations

import argparse
import sys
from datetime import date

from rollcall.config import ConfigurationError, SchedulingConfig, get_settings
from rollcall.db.session import SessionLocal, engine
from rollcall.logging_config import get_logger
from rollcall.models import Base
from rollcall.services.processing_service import RosterNotConfiguredError, run_scheduling_pass
from rollcall.services.run_state_service import get_last_run_date
from rollcall.services.webhook_client import get_optional_webhook_client

logger = get_logger("scheduler_tick", "scheduler")


def run_once(today: date, force: bool = False, dry_run: bool = False) -> int:
    Base.metadata.create_all(bind=engine)
    config = SchedulingConfig.from_settings(get_settings())

    db = SessionLocal()
    try:
        last = get_last_run_date(db)
        if last == today and not force:
            logger.info("Already ran on %s; use --force to run again", today)
            return 0

        webhook_client = None if dry_run else get_optional_webhook_client()

        try:
            summary = run_scheduling_pass(db, config, today=today, webhook_client=webhook_client)
        except (ConfigurationError, RosterNotConfiguredError) as e:
            logger.error("Scheduling run aborted: %s", e)
            return 1

        logger.info(
            "Scheduled %s; %d status changes; %d/%d notifications sent",
            ", ".join(d.isoformat() for d in summary.scheduled) or "nothing",
            len(summary.status_changes),
            summary.notifications_sent,
            summary.notifications_total,
        )
        return 0
    finally:
        db.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the time-driven scheduling pass once")
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        default=None,
        help="Pretend today is this date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Run even if a pass already completed today",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Write statuses but do not call the webhook",
    )
    args = parser.parse_args()
    sys.exit(run_once(today=args.today or date.today(), force=args.force, dry_run=args.dry_run))


if __name__ == "__main__":
    main()

# aviasafe/worker/scheduler.py
from __future__ import annotations

import logging
import os
from datetime import date
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.exc import SQLAlchemyError

from aviasafe.crud.assessment import overdue_pending
from aviasafe.db.session import SessionLocal
from aviasafe.services.audit import audit_log, has_event
from aviasafe.services.storage import StorageError, get_storage

log = logging.getLogger("aviasafe.scheduler")

OVERDUE_ACTION = "ASSESSMENT_OVERDUE"


def flag_overdue_assessments(db, today: Optional[date] = None) -> int:
    """
    Record one ASSESSMENT_OVERDUE audit event per pending assessment whose
    completion due date has passed. Assessments already flagged are skipped.
    """
    created = 0
    for a in overdue_pending(db, today):
        if has_event(db, OVERDUE_ACTION, "occurrence", a.occurrence_id):
            continue
        audit_log(
            db,
            user_id=None,
            action=OVERDUE_ACTION,
            entity_type="occurrence",
            entity_id=a.occurrence_id,
            meta={
                "assessment_id": a.id,
                "completion_due_date": a.completion_due_date.isoformat(),
            },
        )
        created += 1
    return created


def check_storage_bucket() -> bool:
    """True when the attachments bucket exists; logs a warning otherwise."""
    storage = get_storage()
    try:
        ready = storage.bucket_exists()
    except StorageError:
        log.exception("storage bucket check failed bucket=%s", storage.bucket)
        return False
    if not ready:
        log.warning(
            "attachments bucket missing bucket=%s; run POST /api/admin/storage/initialize",
            storage.bucket,
        )
    return ready


def run_daily_jobs() -> dict:
    """
    One-shot daily pipeline:
      - flag pending assessments past their completion due date
      - verify the attachments bucket exists
    """
    db = SessionLocal()
    try:
        flagged = flag_overdue_assessments(db)
    except SQLAlchemyError:
        log.exception("overdue assessment scan failed")
        db.rollback()
        flagged = 0
    finally:
        db.close()

    result = {"overdue_flagged": flagged, "bucket_ready": check_storage_bucket()}
    log.info("daily jobs done %s", result)
    return result


def make_scheduler() -> BackgroundScheduler:
    """
    Create and return a BackgroundScheduler instance configured from env:
      - APP_TIMEZONE           (default: UTC)
      - APP_SCHEDULER_HOUR     (default: 6)
      - APP_SCHEDULER_MINUTE   (default: 0)
    """
    tzname = os.getenv("APP_TIMEZONE", "UTC")
    hour = int(os.getenv("APP_SCHEDULER_HOUR", "6"))
    minute = int(os.getenv("APP_SCHEDULER_MINUTE", "0"))

    sched = BackgroundScheduler(timezone=tzname)
    sched.add_job(
        run_daily_jobs,
        CronTrigger(hour=hour, minute=minute),
        id="daily_jobs",
        replace_existing=True,
    )
    return sched

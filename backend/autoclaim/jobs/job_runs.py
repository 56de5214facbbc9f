"""
job_runs bookkeeping shared by the background triggers.

Each run gets a job_runs row: running -> success with the result dict merged
into meta, or fail with the error; a failing run re-raises after recording.
"""

import logging
import time
import uuid
from typing import Callable

from sqlalchemy.orm import Session

from autoclaim.core.db import SessionLocal
from autoclaim.models.job_runs import JobRun
from autoclaim.utils.dates import utcnow

logger = logging.getLogger(__name__)


def run_recorded(job_name: str, meta: dict, work: Callable[[Session, uuid.UUID], dict]) -> dict:
    db: Session = SessionLocal()
    run_id = uuid.uuid4()

    job = JobRun(run_id=run_id, job_name=job_name, status="running", meta=meta)
    db.add(job)
    db.commit()

    try:
        result = work(db, run_id)

        job = db.get(JobRun, run_id)
        job.status = "success"
        job.ended_at = utcnow()
        job.items_processed = int(result.get("processed", 0))
        job.items_failed = int(result.get("failed", 0))
        job.meta = {**(job.meta or {}), **result}
        db.commit()

        print(result)
        return result

    except Exception as e:
        db.rollback()
        job = db.get(JobRun, run_id)
        job.status = "fail"
        job.ended_at = utcnow()
        job.error = repr(e)
        db.commit()
        raise

    finally:
        db.close()


def run_periodically(name: str, interval_seconds: int, tick: Callable[[], dict]) -> None:
    """
    Call tick every interval_seconds until interrupted. A failed tick is
    already recorded in job_runs; the loop logs it and keeps going.
    """
    logger.info("%s loop started interval=%ds", name, interval_seconds)
    while True:
        t0 = time.monotonic()
        try:
            tick()
        except Exception:
            logger.exception("%s run failed", name)
        time.sleep(max(0.0, interval_seconds - (time.monotonic() - t0)))

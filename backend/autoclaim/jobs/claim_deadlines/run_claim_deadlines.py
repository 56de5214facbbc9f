import argparse
import logging
import uuid

from sqlalchemy.orm import Session

from autoclaim.claims.events import ClaimEventBus
from autoclaim.claims.service import ClaimService
from autoclaim.core.config import load_config
from autoclaim.core.logging import configure_logging_if_needed
from autoclaim.jobs.job_runs import run_recorded
from autoclaim.notifications.observers import EventLogNotifier, LoggingNotifier
from autoclaim.stores.sqlalchemy_store import SqlAlchemyClaimRepository
from autoclaim.utils.dates import utcnow

logger = logging.getLogger(__name__)


def deadlines_once(db: Session, run_id: uuid.UUID, *, warning_days: int) -> dict:
    repository = SqlAlchemyClaimRepository(db)
    service = ClaimService(
        repository,
        ClaimEventBus([LoggingNotifier(), EventLogNotifier(db)]),
        deadline_warning_days=warning_days,
    )
    now = utcnow()

    expired = service.expire_overdue(now)
    db.commit()
    flagged = service.flag_deadline_approaching(now)
    db.commit()

    result = {"processed": expired + flagged, "failed": 0, "expired": expired, "deadline_approaching": flagged}
    logger.info("Claim deadlines run_id=%s %s", run_id, result)
    return result


def main():
    p = argparse.ArgumentParser(description="Expire overdue claims and flag deadlines that are close")
    p.add_argument("--warning-days", type=int, help="Override DEADLINE_WARNING_DAYS")

    args = p.parse_args()

    configure_logging_if_needed()
    warning_days = args.warning_days if args.warning_days is not None else load_config().deadline_warning_days

    run_recorded(
        "claim_deadlines",
        {"args": vars(args)},
        lambda db, run_id: deadlines_once(db, run_id, warning_days=warning_days),
    )


if __name__ == "__main__":
    main()

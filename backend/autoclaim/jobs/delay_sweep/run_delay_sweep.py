import argparse
import logging
import uuid
from datetime import timedelta

from sqlalchemy.orm import Session

from autoclaim.claims.events import ClaimEventBus
from autoclaim.claims.service import ClaimService
from autoclaim.core.config import load_config
from autoclaim.core.logging import configure_logging_if_needed
from autoclaim.eligibility.service import EligibilityEvaluator
from autoclaim.jobs.delay_sweep.sweep import DelaySweep, SweepSettings
from autoclaim.jobs.job_runs import run_periodically, run_recorded
from autoclaim.notifications.observers import EventLogNotifier, LoggingNotifier
from autoclaim.stores.sqlalchemy_store import SqlAlchemyClaimRepository
from autoclaim.utils.dates import utcnow

logger = logging.getLogger(__name__)


def sweep_once(db: Session, run_id: uuid.UUID) -> dict:
    cfg = load_config()
    repository = SqlAlchemyClaimRepository(db)
    events = ClaimEventBus([LoggingNotifier(), EventLogNotifier(db)])

    sweep = DelaySweep(
        repository,
        ClaimService(repository, events, deadline_warning_days=cfg.deadline_warning_days),
        EligibilityEvaluator(exchange_rate=cfg.eur_to_gbp_rate),
        settings=SweepSettings(
            lookback_days=cfg.sweep_lookback_days,
            completion_buffer=timedelta(minutes=cfg.completion_buffer_minutes),
            default_ticket_price=cfg.default_ticket_price,
        ),
        transaction=db,
    )
    logger.info("Delay sweep start run_id=%s", run_id)
    result = sweep.run(utcnow())
    logger.info("Delay sweep done run_id=%s %s", run_id, result)
    return result


def main():
    p = argparse.ArgumentParser(description="Evaluate completed journeys and open delay claims")
    p.add_argument("--once", action="store_true", help="Run a single sweep and exit")

    args = p.parse_args()

    configure_logging_if_needed()
    cfg = load_config()

    def tick() -> dict:
        return run_recorded("delay_sweep", {"args": vars(args)}, sweep_once)

    if args.once:
        tick()
        return

    run_periodically("delay_sweep", cfg.sweep_interval_seconds, tick)


if __name__ == "__main__":
    main()

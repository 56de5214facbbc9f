import argparse
import logging
import uuid

from sqlalchemy.orm import Session

from autoclaim.core.config import load_config
from autoclaim.core.logging import configure_logging_if_needed
from autoclaim.jobs.feed.http import get_with_retry, make_client
from autoclaim.jobs.feed.loader import load_trips
from autoclaim.jobs.feed.parser import parse_feed
from autoclaim.jobs.job_runs import run_periodically, run_recorded
from autoclaim.matching.normalizer import Region

logger = logging.getLogger(__name__)


def poll_once(db: Session, run_id: uuid.UUID, *, url: str, region: Region) -> dict:
    cfg = load_config()
    logger.info("Feed poll start run_id=%s url=%s", run_id, url)

    with make_client(cfg) as client:
        payload = get_with_retry(cfg, client, url)

    trips, skipped = parse_feed(payload, region=region)
    result = load_trips(db, trips)
    result.update({"processed": len(trips), "failed": skipped, "skipped": skipped})

    logger.info("Feed poll done run_id=%s %s", run_id, result)
    return result


def main():
    p = argparse.ArgumentParser(description="Poll the train feed and upsert trains")
    p.add_argument("--once", action="store_true", help="Run a single poll and exit")
    p.add_argument("--url", help="Override FEED_URL")
    p.add_argument("--region", choices=[r.value for r in Region], default=Region.UK.value)

    args = p.parse_args()

    configure_logging_if_needed()
    cfg = load_config()
    url = args.url or cfg.feed_url
    region = Region(args.region)

    def tick() -> dict:
        return run_recorded(
            "feed_poll",
            {"args": vars(args)},
            lambda db, run_id: poll_once(db, run_id, url=url, region=region),
        )

    if args.once:
        tick()
        return

    run_periodically("feed_poll", cfg.feed_poll_seconds, tick)


if __name__ == "__main__":
    main()

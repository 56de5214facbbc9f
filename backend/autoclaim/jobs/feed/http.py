import logging
import random
import time

import httpx

from autoclaim.core.config import AutoclaimConfig

logger = logging.getLogger(__name__)

RETRY_STATUSES = {429, 502, 503, 504, 520, 522, 524}


def log_request(request: httpx.Request) -> None:
    logger.debug("HTTP %s %s", request.method, request.url)


def make_client(cfg: AutoclaimConfig, *, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    timeout = httpx.Timeout(
        connect=cfg.feed_connect_timeout,
        read=cfg.feed_read_timeout,
        write=cfg.feed_read_timeout,
        pool=cfg.feed_connect_timeout,
    )
    return httpx.Client(
        timeout=timeout,
        headers={"Accept": "application/json"},
        event_hooks={"request": [log_request]},
        transport=transport,
    )


def sleep_backoff(cfg: AutoclaimConfig, *, attempt: int, url: str) -> None:
    sleep_s = cfg.feed_backoff_base * (2 ** (attempt - 1))
    sleep_s += random.uniform(0, 0.5)
    logger.info("Sleeping %.2fs before retrying %s", sleep_s, url)
    time.sleep(sleep_s)


def get_with_retry(cfg: AutoclaimConfig, client: httpx.Client, url: str, *, sleep=sleep_backoff) -> dict:
    """
    GET a JSON document, retrying timeouts and gateway/throttling statuses
    with exponential backoff. Other HTTP errors are raised immediately.
    """
    last_err: Exception | None = None

    for attempt in range(1, cfg.feed_retries + 1):
        t0 = time.perf_counter()
        try:
            r = client.get(url)
            elapsed = time.perf_counter() - t0

            if r.status_code in RETRY_STATUSES:
                logger.warning(
                    "Retryable HTTP %d (attempt %d/%d) GET %s after %.2fs body_snippet=%r",
                    r.status_code,
                    attempt,
                    cfg.feed_retries,
                    url,
                    elapsed,
                    (r.text or "")[:300],
                )
                last_err = httpx.HTTPStatusError("Retryable status", request=r.request, response=r)
            else:
                if r.is_error:
                    logger.error(
                        "Non-retryable HTTP %d GET %s after %.2fs body_snippet=%r",
                        r.status_code,
                        url,
                        elapsed,
                        (r.text or "")[:300],
                    )
                r.raise_for_status()
                logger.debug("GET %s completed in %.2fs status=%d", url, elapsed, r.status_code)
                return r.json()

        except httpx.TimeoutException as e:
            last_err = e
            logger.warning(
                "%s (attempt %d/%d) GET %s after %.2fs",
                e.__class__.__name__,
                attempt,
                cfg.feed_retries,
                url,
                time.perf_counter() - t0,
            )

        except httpx.TransportError as e:
            last_err = e
            logger.warning("Request failed (attempt %d/%d) GET %s error=%r", attempt, cfg.feed_retries, url, e)

        if attempt < cfg.feed_retries:
            sleep(cfg, attempt=attempt, url=url)

    raise last_err  # type: ignore

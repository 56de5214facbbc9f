import logging

from autoclaim.core.config import load_config


def configure_logging_if_needed() -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=load_config().log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

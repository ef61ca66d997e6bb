import logging

from datagateway.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once for the whole service"""
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL), logging.INFO),
        format=LOG_FORMAT,
    )
    # Engine-level SQL echo is too noisy for request logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

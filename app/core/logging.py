import logging
from typing import Optional

from app.core.config import settings

LOGGER_NAME = "records"

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach one stream handler to the ``records`` logger tree. Safe to call more than once."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel((level or settings.log_level).upper())
    if not any(getattr(h, "_records_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._records_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger

# capture_inventory/logging_setup.py
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

_ROOT = "capture_inventory"
_SECRET_ENV_KEYS = ("OPENAI_API_KEY",)
_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_DATEFMT = "(%Y-%m-%d %H:%M:%S)"


class RedactSecretsFilter(logging.Filter):
    """Replace any API key value found in a rendered log message."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        redacted = msg
        for k in _SECRET_ENV_KEYS:
            val = os.getenv(k)
            if val:
                redacted = redacted.replace(val, "[REDACTED]")
        if redacted != msg:
            record.msg = redacted
            record.args = None
        return True


def configure_logging(*, debug: bool = False, log_file: str | None = None) -> logging.Logger:
    """
    Attach a console handler (and an optional rotating file handler) to the
    package logger. Safe to call repeatedly; handlers are only added once.
    """
    logger = logging.getLogger(_ROOT)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if not logger.handlers:
        formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

        console = logging.StreamHandler()
        console.setFormatter(formatter)
        console.addFilter(RedactSecretsFilter())
        logger.addHandler(console)

        if log_file:
            try:
                os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
                handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
                handler.setFormatter(formatter)
                handler.addFilter(RedactSecretsFilter())
                logger.addHandler(handler)
            except OSError as e:
                logger.warning("file logging disabled (%s): %s", log_file, e)

    return logger


__all__ = ["RedactSecretsFilter", "configure_logging"]

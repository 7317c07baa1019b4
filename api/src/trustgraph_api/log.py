"""
Structured key=value logging for the TrustGraph engine.

The run scorer emits one DEBUG line per pass (overall score, flag and
recommendation counts, stability); the API emits INFO lines for scored runs
and for rejected requests (operation and error class), and ERROR when the
engine configuration is invalid. Level comes from TRUSTGRAPH_LOG_LEVEL.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from .config import get_engine_config


class StructuredFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_data.update(extra_data)
        return " ".join(f"{k}={v}" for k, v in log_data.items())


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, get_engine_config().log_level, logging.INFO))
    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    logger.log(level, msg, extra={"extra_data": kwargs})

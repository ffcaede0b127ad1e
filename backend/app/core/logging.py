"""Structured JSON logging setup."""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "credit-decision-engine"


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter with timestamp and service metadata."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level: str = "INFO", json_format: bool = True) -> None:
    """Configure the root logger for the service."""
    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(
            CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
        )
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
    logger.addHandler(handler)


def mask_ssn(ssn: str | None) -> str:
    """Mask an SSN down to its last four digits for log output."""
    digits = "".join(ch for ch in (ssn or "") if ch.isdigit())
    if len(digits) < 4:
        return "***-**-****"
    return f"***-**-{digits[-4:]}"

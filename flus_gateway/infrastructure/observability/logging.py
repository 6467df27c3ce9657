"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "flus-gateway"


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_evaluation(
    request_id: str,
    session_id: str,
    fired_count: int,
    skipped: Dict[str, int],
    duration_ms: float,
) -> None:
    """Log structured notification evaluation outcome"""
    logging.info(
        "Notification evaluation completed",
        extra={
            "request_id": request_id,
            "session_id": session_id,
            "step": "evaluate_complete",
            "fired_count": fired_count,
            "skipped": skipped,
            "duration_ms": duration_ms,
        },
    )


def log_advance(request_id: str, pattern_id: str, mark_paid: bool, next_due_date: str) -> None:
    """Log a recurring occurrence being paid or skipped"""
    logging.info(
        "Recurring pattern advanced",
        extra={
            "request_id": request_id,
            "pattern_id": pattern_id,
            "step": "advance_complete",
            "action": "paid" if mark_paid else "skipped",
            "next_due_date": next_due_date,
        },
    )

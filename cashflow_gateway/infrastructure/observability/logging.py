"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from cashflow_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


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


def log_plan_generated(
    request_id: str,
    country: str,
    plan_id: str,
    confidence: float,
    seasonal: bool,
    duration_ms: float,
) -> None:
    """Log structured plan generation outcome for analysis"""
    logging.info(
        "Projection plan generated",
        extra={
            "request_id": request_id,
            "country": country,
            "plan_id": plan_id,
            "step": "plan_generated",
            "confidence": confidence,
            "baseline": "seasonal" if seasonal else "trend",
            "duration_ms": duration_ms,
        },
    )


def log_comparison(request_id: str, country: str, plan_id: str, metrics: Dict[str, float], weeks_with_data: int) -> None:
    """Log plan-vs-actual accuracy for tracking projection quality"""
    logging.info(
        "Plan compared against actuals",
        extra={
            "request_id": request_id,
            "country": country,
            "plan_id": plan_id,
            "step": "plan_compared",
            "weeks_with_data": weeks_with_data,
            **metrics,
        },
    )

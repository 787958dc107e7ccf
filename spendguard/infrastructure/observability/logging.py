"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List

from pythonjsonlogger import jsonlogger

from spendguard.config import settings


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

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


logger = logging.getLogger("spendguard")


def log_alerts_emitted(user_id: str, expense_id: str, alert_types: List[str]) -> None:
    """Log which alerts a single expense produced"""
    logger.info(
        "Alert checks completed",
        extra={
            "user_id": user_id,
            "expense_id": expense_id,
            "step": "alert_checks",
            "alert_types": alert_types,
            "alert_count": len(alert_types),
        },
    )


def log_alert_check_failure(user_id: str, expense_id: str, error: Exception) -> None:
    logger.error(
        f"Alert check failed after expense creation: {error}",
        extra={
            "user_id": user_id,
            "expense_id": expense_id,
            "step": "alert_checks",
            "error_type": type(error).__name__,
        },
    )


def log_forecast(user_id: str, risk_level: str, estimated_days_left: int, burn_rate: str) -> None:
    logger.info(
        "Forecast generated",
        extra={
            "user_id": user_id,
            "step": "forecast",
            "risk_level": risk_level,
            "estimated_days_left": estimated_days_left,
            "burn_rate": burn_rate,
        },
    )


def log_recommendations(user_id: str, count: int) -> None:
    logger.info(
        "Recommendations replaced",
        extra={"user_id": user_id, "step": "recommendations", "recommendation_count": count},
    )


def log_digest_failure(user_id: str, error: Exception) -> None:
    logger.error(
        f"Failed to generate weekly digest for user {user_id}: {error}",
        extra={"user_id": user_id, "step": "weekly_digest", "error_type": type(error).__name__},
    )

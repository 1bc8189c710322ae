"""Structured JSON logging for the analysis service"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping every record with time, level and service name"""

    def __init__(self, *args: Any, service: str = "discipline-gateway", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.service = service

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service


def setup_logging(level: str = "INFO", service: str = "discipline-gateway") -> None:
    """Send JSON log lines to stdout, replacing any existing root handlers"""
    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service=service))
    logger.addHandler(handler)


def log_analysis(
    request_id: str,
    analysis_id: str,
    blockchain: str,
    transfer_count: int,
    conversion_count: int,
    frequency: str,
    duration_ms: float,
) -> None:
    """Log one transfer fetch + pattern detection"""
    logging.info(
        "Analysis created",
        extra={
            "request_id": request_id,
            "analysis_id": analysis_id,
            "step": "analysis_created",
            "blockchain": blockchain,
            "transfer_count": transfer_count,
            "conversion_count": conversion_count,
            "frequency": frequency,
            "duration_ms": duration_ms,
        },
    )


def log_results(
    request_id: str,
    analysis_id: str,
    score: int,
    cost_type: str,
    cost_or_saved_amount: float,
    duration_ms: float,
    result_id: Optional[str] = None,
) -> None:
    """Log one completed cost/score/recommendation run"""
    logging.info(
        "Results computed",
        extra={
            "request_id": request_id,
            "analysis_id": analysis_id,
            "result_id": result_id,
            "step": "results_complete",
            "discipline_score": score,
            "cost_type": cost_type,
            "cost_or_saved_amount": round(cost_or_saved_amount, 6),
            "duration_ms": duration_ms,
        },
    )

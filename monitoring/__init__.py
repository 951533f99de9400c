"""monitoring package"""
from .logger import (
    start_metrics_server,
    get_logger,
    QUOTE_REQUESTS,
    QUOTE_LATENCY,
    LEADS_CREATED,
    NOTIFICATION_FAILURES,
    GUARDRAIL_FAILURES,
)

__all__ = [
    "start_metrics_server", "get_logger",
    "QUOTE_REQUESTS", "QUOTE_LATENCY", "LEADS_CREATED",
    "NOTIFICATION_FAILURES", "GUARDRAIL_FAILURES",
]

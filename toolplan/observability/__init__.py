"""
Observability Package - structured logging and Prometheus metrics.
"""

from toolplan.observability.logging import (
    clear_correlation_id,
    configure_logging,
    correlation_id_context,
    get_correlation_id,
    get_logger,
    set_correlation_id,
)
from toolplan.observability.metrics import (
    get_metrics_app,
    record_dropped_step,
    record_plan_outcome,
    record_step,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    "correlation_id_context",
    # Metrics
    "get_metrics_app",
    "record_plan_outcome",
    "record_dropped_step",
    "record_step",
]

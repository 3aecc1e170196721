"""
Prometheus Metrics Module

Counters and histograms describing planning and execution outcomes. The
FastAPI app mounts make_asgi_app() at /metrics.

Pattern: Metrics collection for observability
"""

from typing import Optional

from prometheus_client import Counter, Histogram, make_asgi_app

# =============================================================================
# Planning Metrics
# =============================================================================

PLANS_TOTAL = Counter(
    name="toolplan_plans_total",
    documentation="Planning attempts by outcome (planned, empty, skipped, failed)",
    labelnames=["outcome"],
)

PLAN_STEPS_DROPPED_TOTAL = Counter(
    name="toolplan_plan_steps_dropped_total",
    documentation="Plan steps removed during validation, by reason",
    labelnames=["reason"],
)

# =============================================================================
# Execution Metrics
# =============================================================================

STEPS_TOTAL = Counter(
    name="toolplan_steps_total",
    documentation="Executed plan steps by tool and status",
    labelnames=["tool", "status"],
)

STEP_DURATION_SECONDS = Histogram(
    name="toolplan_step_duration_seconds",
    documentation="Tool invocation duration in seconds",
    labelnames=["tool"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_plan_outcome(outcome: str) -> None:
    """
    Record the outcome of one planning attempt.

    Args:
        outcome: "planned", "empty", "skipped" or "failed"
    """
    PLANS_TOTAL.labels(outcome=outcome).inc()


def record_dropped_step(reason: str) -> None:
    """Record a plan step dropped during validation."""
    PLAN_STEPS_DROPPED_TOTAL.labels(reason=reason).inc()


def record_step(tool: str, status: str, duration_seconds: Optional[float] = None) -> None:
    """
    Record one executed step.

    Args:
        tool: Tool name
        status: "success" or "error"
        duration_seconds: Invocation time; None when the tool was never called
    """
    STEPS_TOTAL.labels(tool=tool, status=status).inc()
    if duration_seconds is not None:
        STEP_DURATION_SECONDS.labels(tool=tool).observe(duration_seconds)


def get_metrics_app():
    """ASGI app serving the Prometheus exposition format."""
    return make_asgi_app()

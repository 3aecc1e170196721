"""
Audit Package - append-only planning and execution records.
"""

from toolplan.audit.sink import (
    AuditSink,
    InMemoryAuditSink,
    LoggingAuditSink,
    RedisAuditSink,
)

__all__ = [
    "AuditSink",
    "InMemoryAuditSink",
    "LoggingAuditSink",
    "RedisAuditSink",
]

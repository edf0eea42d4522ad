# src/blockci/core/traceability/__init__.py
"""
Rastreabilidade de execuções do blockci (Execution Record + Event Log).
"""

from .record import (
    ExecutionRecord,
    add_event,
    create_record,
    node_failed,
    node_finished,
    node_started,
    run_finished,
    run_started,
)

__all__ = [
    "ExecutionRecord",
    "add_event",
    "create_record",
    "node_failed",
    "node_finished",
    "node_started",
    "run_finished",
    "run_started",
]

"""Timing instrumentation for schema_core hot paths."""

from schema_core.telemetry.profiling import (
    OperationTimings,
    TimingStats,
    get_timings,
    profile_operation,
    reset_timings,
)

__all__ = ["OperationTimings", "TimingStats", "get_timings", "profile_operation", "reset_timings"]

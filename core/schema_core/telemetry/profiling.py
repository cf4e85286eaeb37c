"""Wall-clock timings for the ledger's hot paths.

Normalising a schema directory, diffing two snapshots and writing a version
file are the operations whose cost grows with the size of a project.  Each of
them is wrapped with :func:`profile_operation`; durations land in the
process-wide :class:`OperationTimings` registry, so a long-lived host such as
an editor backend can ask how slow ``snapshot.diff`` has been lately::

    stats = get_timings().stats("snapshot.diff")
    if stats is not None and stats.max_ms > 250:
        ...
"""

from __future__ import annotations

import functools
import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True)
class TimingStats:
    """Aggregate over the retained samples of one operation."""

    operation: str
    count: int
    mean_ms: float
    min_ms: float
    max_ms: float
    last_ms: float


class OperationTimings:
    """Per-operation history of call durations in milliseconds.

    Only the most recent *window* samples of each operation are kept, so the
    registry stays bounded no matter how many versions a session creates.
    """

    def __init__(self, window: int = 100) -> None:
        self._window = window
        self._samples: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def record(self, operation: str, duration_ms: float) -> None:
        with self._lock:
            samples = self._samples.get(operation)
            if samples is None:
                samples = self._samples[operation] = deque(maxlen=self._window)
            samples.append(duration_ms)

    def stats(self, operation: str) -> TimingStats | None:
        """Return the aggregate for *operation*, or ``None`` if never timed."""
        with self._lock:
            samples = list(self._samples.get(operation, ()))
        if not samples:
            return None

        return TimingStats(
            operation=operation,
            count=len(samples),
            mean_ms=round(sum(samples) / len(samples), 3),
            min_ms=min(samples),
            max_ms=max(samples),
            last_ms=samples[-1],
        )

    def operations(self) -> list[str]:
        with self._lock:
            return sorted(self._samples)


_timings = OperationTimings()
_timings_lock = threading.Lock()


def get_timings() -> OperationTimings:
    """The registry that :func:`profile_operation` records into."""
    return _timings


def reset_timings() -> None:
    """Start a fresh registry, discarding every recorded sample."""
    global _timings  # noqa: PLW0603
    with _timings_lock:
        _timings = OperationTimings()


def profile_operation(name: str) -> Callable[[F], F]:
    """Record the duration of every call of the decorated function under *name*.

    The sample is recorded even when the call raises.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                elapsed_ms = round((time.perf_counter() - started) * 1000, 3)
                get_timings().record(name, elapsed_ms)
                logger.debug("%s took %.3f ms", name, elapsed_ms)

        return wrapper  # type: ignore[return-value]

    return decorator

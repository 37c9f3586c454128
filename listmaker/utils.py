"""
Shared helpers for listmaker: error taxonomy, argument checks, settings,
logging setup and performance measurement.
"""

import gc
import logging
import operator
import sys
import time
import tracemalloc
from typing import Any, Callable, Dict, List, Optional

from .models import FluentSettings, PerformanceInfo, PerformanceSummary

logger = logging.getLogger(__name__)


# ---------- Errors ----------

class ListMakerError(Exception):
    """Base class for every error raised by listmaker."""
    pass


class InvalidArgumentError(ListMakerError, ValueError):
    """Raised for an absent or non-callable function, or a negative count or index."""
    pass


class IndexOutOfRangeError(ListMakerError, IndexError):
    """Raised when get() is asked for a position past the end of the sequence."""
    pass


class EmptyResultError(ListMakerError, LookupError):
    """Raised when an operation needs at least one element and finds none."""
    pass


class DuplicateKeyError(ListMakerError, ValueError):
    """Raised when two elements map to the same key in a unique mapping."""

    def __init__(self, key):
        super().__init__(f"Same key used twice: {key!r}")
        self.key = key


class SinglePassConsumedError(ListMakerError, RuntimeError):
    """Raised in strict mode when a single-pass source is iterated a second time."""
    pass


# ---------- Argument checks ----------

def require_not_none(value, name: str):
    """Return value, or raise InvalidArgumentError if it is None"""
    if value is None:
        raise InvalidArgumentError(f"{name} cannot be None")
    return value


def require_callable(fn, name: str) -> Callable:
    """Return fn, or raise InvalidArgumentError if it is None or not callable"""
    require_not_none(fn, name)
    if not callable(fn):
        raise InvalidArgumentError(f"{name} must be callable, got {type(fn).__name__}")
    return fn


def require_non_negative(n, message: str) -> int:
    """Return n as an int, or raise InvalidArgumentError if it is not a non-negative integer"""
    if n is None or isinstance(n, bool):
        raise InvalidArgumentError(message)
    try:
        n = operator.index(n)
    except TypeError:
        raise InvalidArgumentError(f"expected an integer, got {type(n).__name__}") from None
    if n < 0:
        raise InvalidArgumentError(message)
    return n


# ---------- Settings & logging ----------

_settings: Optional[FluentSettings] = None


def get_settings() -> FluentSettings:
    """Return the active settings, loading them from the environment on first use"""
    global _settings
    if _settings is None:
        _settings = FluentSettings.from_env()
    return _settings


def configure(settings: Optional[FluentSettings] = None, **overrides) -> FluentSettings:
    """Replace the active settings.

    With no arguments the settings are reloaded from the environment. Keyword
    overrides are applied on top of the given (or current) settings.
    """
    global _settings
    if settings is None:
        settings = FluentSettings.from_env() if not overrides else get_settings()
    if overrides:
        settings = FluentSettings(**{**settings.model_dump(), **overrides})
    _settings = settings
    return _settings


def setup_logging(settings: Optional[FluentSettings] = None) -> logging.Logger:
    """Setup structured logging for listmaker"""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format=settings.log_format,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    package_logger = logging.getLogger('listmaker')
    package_logger.setLevel(settings.log_level)
    return package_logger


# ---------- Performance tracking ----------

_performance_metrics: Dict[str, Any] = {
    "operations": [],
    "total_time_ms": 0.0,
    "total_memory_mb": 0.0,
    "operation_count": 0
}


def _record(info: PerformanceInfo):
    _performance_metrics["operations"].append(info)
    _performance_metrics["total_time_ms"] += info.execution_time_ms
    _performance_metrics["total_memory_mb"] += info.memory_usage_mb
    _performance_metrics["operation_count"] += 1


def _finish(operation_name: str, start_time: float, **fields) -> PerformanceInfo:
    execution_time_ms = (time.perf_counter() - start_time) * 1000
    _, peak = tracemalloc.get_traced_memory()
    info = PerformanceInfo(
        operation=operation_name,
        execution_time_ms=execution_time_ms,
        memory_usage_mb=peak / 1024 / 1024,
        timestamp=time.time(),
        **fields
    )
    _record(info)
    return info


def measure_performance(operation_name: str, func, *args, **kwargs) -> PerformanceInfo:
    """Measure performance of a function call with memory tracking.

    The measurement is recorded even when func raises; the exception is then
    re-raised unchanged.
    """
    require_callable(func, "func")

    tracemalloc.start()
    gc.collect()
    start_time = time.perf_counter()

    try:
        result = func(*args, **kwargs)
    except Exception as e:
        info = _finish(operation_name, start_time, success=False, error=str(e))
        logger.error(f"{operation_name} failed after {info.execution_time_ms:.2f}ms: {e}")
        raise
    else:
        info = _finish(
            operation_name,
            start_time,
            success=True,
            result_size=len(result) if hasattr(result, "__len__") else None
        )
        logger.debug(f"{operation_name} completed in {info.execution_time_ms:.2f}ms")
        return info
    finally:
        tracemalloc.stop()


def get_performance_summary() -> PerformanceSummary:
    """Get summary of all performance metrics"""
    count = _performance_metrics["operation_count"]
    if count == 0:
        return PerformanceSummary()

    return PerformanceSummary(
        total_operations=count,
        total_time_ms=_performance_metrics["total_time_ms"],
        total_memory_mb=_performance_metrics["total_memory_mb"],
        avg_time_ms=_performance_metrics["total_time_ms"] / count,
        avg_memory_mb=_performance_metrics["total_memory_mb"] / count
    )


def get_recorded_operations() -> List[PerformanceInfo]:
    return list(_performance_metrics["operations"])


def clear_performance_metrics():
    """Clear all performance metrics"""
    global _performance_metrics
    _performance_metrics = {
        "operations": [],
        "total_time_ms": 0.0,
        "total_memory_mb": 0.0,
        "operation_count": 0
    }


def validate_lazy_evaluation(sequence) -> bool:
    """Validate that an object is an unevaluated fluent recipe"""
    return hasattr(sequence, '_ops') and hasattr(sequence, '_source')

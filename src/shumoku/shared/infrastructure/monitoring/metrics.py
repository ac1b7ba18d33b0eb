"""
Metrics collection for Shumoku parse, layout and render stages.
"""

import inspect
import time
import threading
from typing import Dict, Any, List, Optional, Union
from collections import defaultdict, deque
from dataclasses import dataclass, field
from functools import wraps

from ...config.settings import get_settings


@dataclass
class Metric:
    """Represents a single metric measurement."""

    name: str
    value: Union[int, float]
    timestamp: float
    tags: Dict[str, str] = field(default_factory=dict)


class MetricsCollector:
    """
    Collects performance metrics for Shumoku operations.

    Thread-safe; keeps a bounded history per metric.
    """

    def __init__(self, max_history: Optional[int] = None, enabled: Optional[bool] = None):
        config = get_settings().monitoring_config

        self.max_history = max_history or config['max_history']
        self.enabled = config['enabled'] if enabled is None else enabled

        self._lock = threading.RLock()
        self._history: Dict[str, deque] = defaultdict(lambda: deque(maxlen=self.max_history))
        self._counters: Dict[str, int] = defaultdict(int)
        self._gauges: Dict[str, float] = {}
        self._timers: Dict[str, List[float]] = defaultdict(list)

    def counter(self, name: str, value: int = 1, tags: Dict[str, str] = None) -> None:
        """
        Increment a counter metric.

        Args:
            name: Counter name
            value: Increment value
            tags: Optional tags
        """
        if not self.enabled:
            return
        with self._lock:
            self._counters[name] += value
            self._record(name, self._counters[name], tags)

    def gauge(self, name: str, value: float, tags: Dict[str, str] = None) -> None:
        """Set a gauge metric value."""
        if not self.enabled:
            return
        with self._lock:
            self._gauges[name] = value
            self._record(name, value, tags)

    def timer(self, name: str, duration_seconds: float, tags: Dict[str, str] = None) -> None:
        """Record a timing metric."""
        if not self.enabled:
            return
        with self._lock:
            timings = self._timers[name]
            timings.append(duration_seconds)
            if len(timings) > self.max_history:
                del timings[:-self.max_history]
            self._record(name, duration_seconds, tags)

    def _record(self, name: str, value: Union[int, float], tags: Optional[Dict[str, str]]) -> None:
        self._history[name].append(
            Metric(name=name, value=value, timestamp=time.time(), tags=tags or {})
        )

    def get_counter(self, name: str) -> int:
        """Get current counter value."""
        return self._counters.get(name, 0)

    def get_gauge(self, name: str) -> float:
        """Get current gauge value."""
        return self._gauges.get(name, 0.0)

    def get_timer_stats(self, name: str) -> Dict[str, float]:
        """Get timer statistics."""
        timings = self._timers.get(name, [])

        if not timings:
            return {'count': 0, 'mean': 0.0, 'min': 0.0, 'max': 0.0, 'p95': 0.0}

        sorted_timings = sorted(timings)
        count = len(sorted_timings)

        return {
            'count': count,
            'mean': sum(sorted_timings) / count,
            'min': sorted_timings[0],
            'max': sorted_timings[-1],
            'p95': sorted_timings[min(int(0.95 * count), count - 1)],
        }

    def get_metric_history(self, name: str, limit: int = 100) -> List[Metric]:
        """Get recent history for a metric."""
        with self._lock:
            metrics = list(self._history.get(name, []))
            return metrics[-limit:] if limit else metrics

    def get_all_metrics(self) -> Dict[str, Any]:
        """Get all current metric values."""
        with self._lock:
            return {
                'counters': dict(self._counters),
                'gauges': dict(self._gauges),
                'timers': {name: self.get_timer_stats(name) for name in self._timers},
            }

    def reset(self) -> None:
        """Drop every recorded value."""
        with self._lock:
            self._history.clear()
            self._counters.clear()
            self._gauges.clear()
            self._timers.clear()


def timed_operation(metric_name: str, tags: Dict[str, str] = None):
    """
    Decorator for timing operations.

    Works for plain and ``async def`` functions.

    Args:
        metric_name: Name of the timing metric
        tags: Optional tags for the metric
    """
    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _record_error(metric_name, tags, e, time.perf_counter() - start_time)
                    raise
                get_metrics().timer(metric_name, time.perf_counter() - start_time, tags)
                return result

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _record_error(metric_name, tags, e, time.perf_counter() - start_time)
                raise
            get_metrics().timer(metric_name, time.perf_counter() - start_time, tags)
            return result

        return wrapper
    return decorator


def _record_error(metric_name: str, tags: Optional[Dict[str, str]], error: Exception, duration: float) -> None:
    error_tags = (tags or {}).copy()
    error_tags['error'] = type(error).__name__
    get_metrics().timer(f"{metric_name}_error", duration, error_tags)


# Global instance
_metrics_collector = None
_metrics_lock = threading.Lock()


def get_metrics() -> MetricsCollector:
    """
    Get the process-wide metrics collector instance.

    Returns:
        MetricsCollector instance
    """
    global _metrics_collector

    if _metrics_collector is None:
        with _metrics_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()

    return _metrics_collector

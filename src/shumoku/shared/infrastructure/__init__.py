"""
Infrastructure services shared across Shumoku.
"""

from .monitoring import get_logger, setup_logging, MetricsCollector, get_metrics, timed_operation

__all__ = ["get_logger", "setup_logging", "MetricsCollector", "get_metrics", "timed_operation"]

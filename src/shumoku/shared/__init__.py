"""
Shared components for Shumoku.

Contains common models, configuration, exceptions and infrastructure used
across all services:

- Graph and layout data models with validation
- Centralized configuration management
- Shared exception hierarchy
- Monitoring (logging and metrics)
"""

from .models import *
from .config import *
from .exceptions import *
from .infrastructure import *

__all__ = [
    # From models
    "BaseModel", "NetworkGraph", "HierarchicalNetworkGraph", "Node", "Link",
    "LinkEndpoint", "Subgraph", "Pin", "GraphSettings", "LegendSettings",
    "ExportConnector", "LayoutResult", "LayoutNode", "LayoutLink",
    "LayoutSubgraph", "LayoutPort", "Bounds", "Position", "Size",

    # From config
    "Settings", "get_settings",

    # From exceptions
    "ShumokuError", "ConfigurationError", "GraphParseError",
    "FileResolutionError", "LayoutError", "RenderError",
    "HierarchyResolutionError",

    # From infrastructure
    "get_logger", "setup_logging", "MetricsCollector", "get_metrics",
]

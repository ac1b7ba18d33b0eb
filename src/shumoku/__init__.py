"""
Shumoku - hierarchical network topology diagrams.

Resolves multi-file topology documents, renders them as SVG/HTML and
navigates between sheets by zooming.
"""

__version__ = "0.4.0"
__author__ = "Shumoku Team"

# Re-export main components for easy access
from .shared.config.settings import get_settings
from .shared.exceptions import ShumokuError, GraphParseError, HierarchyResolutionError
from .shared.models.graph import NetworkGraph, HierarchicalNetworkGraph
from .services.hierarchy import HierarchicalParser, FileSystemResolver, MemoryFileResolver
from .services.rendering import SVGRenderer, RenderOptions
from .services.navigation import ZoomNavigator

__all__ = [
    "get_settings",
    "ShumokuError",
    "GraphParseError",
    "HierarchyResolutionError",
    "NetworkGraph",
    "HierarchicalNetworkGraph",
    "HierarchicalParser",
    "FileSystemResolver",
    "MemoryFileResolver",
    "SVGRenderer",
    "RenderOptions",
    "ZoomNavigator",
]

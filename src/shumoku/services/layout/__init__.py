"""
Layout service for Shumoku.

Assigns coordinates to nodes, subgraphs, ports and link routes.
"""

from .engine import LayoutEngine

__all__ = [
    "LayoutEngine",
]

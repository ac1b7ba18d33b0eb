"""
Diagram pipeline for Shumoku.

Parses a topology file hierarchy, lays it out and renders it.
"""

from .models import OutputFormat, RenderRequest
from .service import DiagramPipeline

__all__ = [
    "DiagramPipeline",
    "OutputFormat",
    "RenderRequest",
]

"""
Data models for the diagram pipeline.
"""

from enum import Enum
from typing import Optional

from pydantic import Field

from ...shared.models import BaseModel


class OutputFormat(str, Enum):
    SVG = "svg"
    HTML = "html"


class RenderRequest(BaseModel):
    """Parameters for rendering a topology file."""

    output_format: OutputFormat = Field(default=OutputFormat.SVG, description="svg or html")
    hierarchical: Optional[bool] = Field(
        default=None, description="Multi-sheet HTML page; defaults to True when the topology has child sheets"
    )
    interactive: bool = Field(default=False, description="Emit data-* attributes for tooltips")
    theme: Optional[str] = Field(default=None, description="Theme when the document sets none")
    allow_errors: bool = Field(default=False, description="Render even if parsing reported errors")

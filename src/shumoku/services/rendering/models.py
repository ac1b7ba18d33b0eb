"""
Data models for rendering.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import Field

from ...shared.models import BaseModel, LayoutResult, NetworkGraph

DEFAULT_FONT_FAMILY = '-apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif'


class RenderMode(str, Enum):
    STATIC = "static"
    INTERACTIVE = "interactive"


class RenderOptions(BaseModel):
    """Options controlling SVG output."""

    render_mode: RenderMode = Field(default=RenderMode.STATIC, description="Static or interactive output")
    font_family: str = Field(default=DEFAULT_FONT_FAMILY, description="Font family for all text")
    theme: Optional[str] = Field(default=None, description="Theme used when the graph sets none")
    embedded_sheets: Dict[str, str] = Field(
        default_factory=dict, description="Rendered child SVG per subgraph id, drawn inside its box"
    )
    icon_dimensions: Dict[str, Tuple[float, float]] = Field(
        default_factory=dict, description="Natural (width, height) of icon images by URL"
    )
    sheet_id: Optional[str] = Field(
        default=None, description="Sheet being rendered; prefixes the data-sheet-id of drill-down subgraphs"
    )

    def sheet_id_for(self, subgraph_id: str) -> str:
        """Sheet key of the child sheet behind a subgraph of this sheet."""
        if self.sheet_id and self.sheet_id != "root":
            return f"{self.sheet_id}/{subgraph_id}"
        return subgraph_id

    @property
    def interactive(self) -> bool:
        return self.render_mode == RenderMode.INTERACTIVE


class HTMLOptions(BaseModel):
    """Options for standalone HTML pages."""

    title: str = Field(default="Network Diagram")
    toolbar: bool = Field(default=True, description="Show zoom toolbar")
    branding: bool = Field(default=False, description="Show footer credit")
    render: RenderOptions = Field(default_factory=RenderOptions)


class SheetData(BaseModel):
    """One sheet of a multi-sheet page."""

    graph: NetworkGraph
    layout: LayoutResult
    label: Optional[str] = None
    parent_id: Optional[str] = None

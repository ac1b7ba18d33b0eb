"""
Layout result models for Shumoku.

A layout engine produces a LayoutResult for a NetworkGraph; the renderer
consumes both. Node positions are centers; subgraph bounds are top-left
rectangles; port positions are relative to their node's center.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import BaseModel
from .graph import Endpoint, Link, Node, Subgraph


class Position(BaseModel):
    """A point in diagram coordinates."""

    x: float = 0.0
    y: float = 0.0


class Size(BaseModel):
    width: float = 0.0
    height: float = 0.0


class Bounds(BaseModel):
    """An axis-aligned rectangle given by its top-left corner and size."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def center(self) -> Position:
        return Position(x=self.x + self.width / 2, y=self.y + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    def is_valid(self) -> bool:
        """Whether the rectangle has a usable, positive size."""
        return self.width > 0 and self.height > 0

    def expand(self, padding: float) -> "Bounds":
        """Grow on every side by ``padding``."""
        return Bounds(
            x=self.x - padding,
            y=self.y - padding,
            width=self.width + padding * 2,
            height=self.height + padding * 2,
        )


class LayoutPort(BaseModel):
    """A port box drawn on a node or subgraph edge."""

    id: str
    label: str
    position: Position = Field(..., description="Offset from the owner's center")
    size: Size = Field(default_factory=lambda: Size(width=8, height=8))
    side: str = Field(default="bottom", description="top, bottom, left or right")


class LayoutNode(BaseModel):
    id: str
    position: Position = Field(..., description="Node center")
    size: Size
    node: Node
    ports: Dict[str, LayoutPort] = Field(default_factory=dict)


class LayoutLink(BaseModel):
    id: str
    from_: str = Field(..., alias="from", description="Source node id")
    to: str
    from_endpoint: Endpoint = Field(..., alias="fromEndpoint")
    to_endpoint: Endpoint = Field(..., alias="toEndpoint")
    points: List[Position] = Field(default_factory=list)
    link: Link


class LayoutSubgraph(BaseModel):
    id: str
    bounds: Bounds
    subgraph: Subgraph
    ports: Dict[str, LayoutPort] = Field(default_factory=dict)


class LayoutResult(BaseModel):
    """Positioned nodes, routed links and subgraph boxes for one graph."""

    nodes: Dict[str, LayoutNode] = Field(default_factory=dict)
    links: Dict[str, LayoutLink] = Field(default_factory=dict)
    subgraphs: Dict[str, LayoutSubgraph] = Field(default_factory=dict)
    bounds: Optional[Bounds] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

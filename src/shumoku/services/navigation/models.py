"""
Data models for zoom navigation.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import Field

from ...shared.models import ROOT_SHEET_ID, BaseModel, Bounds, LayoutResult

DEFAULT_VIEW_BOX = (0.0, 0.0, 800.0, 600.0)


class NavigationState(str, Enum):
    IDLE = "idle"
    ANIMATING_IN = "animating-in"
    ANIMATING_OUT = "animating-out"


class ViewBox(BaseModel):
    """An SVG viewBox window: ``x y w h``."""

    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0


class SheetViewBox(BaseModel):
    """A sheet's current viewBox together with its original, unzoomed one."""

    x: float
    y: float
    w: float
    h: float
    orig_x: float
    orig_y: float
    orig_w: float
    orig_h: float

    @classmethod
    def from_bounds(cls, bounds: Optional[Bounds]) -> "SheetViewBox":
        """Initial viewBox for a sheet drawn within ``bounds`` (800x600 when unusable)."""
        if bounds is not None and bounds.is_valid():
            x, y, w, h = bounds.x, bounds.y, bounds.width, bounds.height
        else:
            x, y, w, h = DEFAULT_VIEW_BOX
        return cls(x=x, y=y, w=w, h=h, orig_x=x, orig_y=y, orig_w=w, orig_h=h)

    def current(self) -> ViewBox:
        return ViewBox(x=self.x, y=self.y, w=self.w, h=self.h)

    def original(self) -> ViewBox:
        return ViewBox(x=self.orig_x, y=self.orig_y, w=self.orig_w, h=self.orig_h)

    def apply(self, view_box: ViewBox) -> None:
        self.x, self.y, self.w, self.h = view_box.x, view_box.y, view_box.w, view_box.h


class SheetInfo(BaseModel):
    """
    Navigation data for one sheet.

    ``bounds`` is where the sheet's subgraph sits in its parent sheet;
    the root sheet has neither parent nor bounds.
    """

    view_box: SheetViewBox
    parent: Optional[str] = None
    bounds: Optional[Bounds] = None
    label: Optional[str] = None


class SubgraphTarget(BaseModel):
    """A drill-down subgraph found under a point."""

    sheet_id: str
    bounds: Bounds


def parent_sheet_id(sheet_id: str) -> Optional[str]:
    if sheet_id == ROOT_SHEET_ID:
        return None
    return sheet_id.rsplit("/", 1)[0] if "/" in sheet_id else ROOT_SHEET_ID


def build_sheet_infos(layouts: Dict[str, LayoutResult],
                      labels: Optional[Dict[str, str]] = None) -> Dict[str, SheetInfo]:
    """
    Derive navigation data from each sheet's layout.

    A child's bounds are those of the subgraph with the child's last id
    segment in the parent sheet's layout.
    """
    labels = labels or {}
    infos: Dict[str, SheetInfo] = {}
    for sheet_id, layout in layouts.items():
        parent = parent_sheet_id(sheet_id)
        bounds = None
        if parent is not None and parent in layouts:
            subgraph = layouts[parent].subgraphs.get(sheet_id.rsplit("/", 1)[-1])
            bounds = subgraph.bounds if subgraph else None
        infos[sheet_id] = SheetInfo(
            view_box=SheetViewBox.from_bounds(layout.bounds),
            parent=parent,
            bounds=bounds,
            label=labels.get(sheet_id),
        )
    return infos


class NavigationEvent(BaseModel):
    """Emitted to listeners whenever the visible sheet changes."""

    sheet_id: str
    previous: Optional[str] = None
    direction: Optional[str] = Field(default=None, description="in, out or None for direct navigation")

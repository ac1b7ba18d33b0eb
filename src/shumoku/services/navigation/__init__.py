"""
Zoom navigation between sheets.

A testable state machine for drilling into and out of hierarchical
diagrams, driven through an explicit frame scheduler.
"""

from .geometry import (
    calculate_scale, ease_out_cubic, fit_child_view_box, lerp_view_box,
    position_parent_view_box, should_trigger_zoom_in, should_trigger_zoom_out,
    zoom_in_target,
)
from .models import (
    NavigationEvent, NavigationState, SheetInfo, SheetViewBox, SubgraphTarget,
    ViewBox, build_sheet_infos,
)
from .scheduler import AsyncioScheduler, FrameScheduler, ManualScheduler
from .service import ZoomNavigator

__all__ = [
    "ZoomNavigator",
    "FrameScheduler",
    "ManualScheduler",
    "AsyncioScheduler",
    "NavigationEvent",
    "NavigationState",
    "SheetInfo",
    "SheetViewBox",
    "SubgraphTarget",
    "ViewBox",
    "build_sheet_infos",
    "calculate_scale",
    "ease_out_cubic",
    "fit_child_view_box",
    "lerp_view_box",
    "position_parent_view_box",
    "should_trigger_zoom_in",
    "should_trigger_zoom_out",
    "zoom_in_target",
]

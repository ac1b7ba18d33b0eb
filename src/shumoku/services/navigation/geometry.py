"""
Pure viewBox math for zoom navigation.

Scale is ``original width / current width``: above 1 the user has zoomed
in, below 1 zoomed out. The zoom-in and zoom-out thresholds are far
apart so a viewBox near one of them cannot flap between sheets.
"""

import math

from ...shared.models import Bounds
from .models import SheetViewBox, ViewBox

ZOOM_IN_SCALE_THRESHOLD = 1.5
ZOOM_OUT_SCALE_THRESHOLD = 0.3
ZOOM_IN_AREA_RATIO = 2.0
ZOOM_OUT_COVERAGE_RATIO = 0.5
CENTER_DISTANCE_FACTOR = 0.7

ANIMATION_DURATION_MS = 450
SHEET_SWITCH_PROGRESS = 0.8
DEBOUNCE_MS = 150
DOUBLE_CLICK_MS = 300

ZOOM_IN_PADDING = 0.1
FIT_RATIO = 0.9
PARENT_CONTEXT_FACTOR = 2


def calculate_scale(view_box: SheetViewBox) -> float:
    if view_box.w <= 0:
        return 1.0
    return view_box.orig_w / view_box.w


def should_trigger_zoom_in(view_box: SheetViewBox, bounds: Bounds, scale: float) -> bool:
    """
    Whether the view has closed in on ``bounds`` enough to enter its sheet.

    Requires a zoomed-in scale, a visible area at most twice the target's
    area, and the view center near the target center.
    """
    if scale < ZOOM_IN_SCALE_THRESHOLD:
        return False

    bounds_area = bounds.width * bounds.height
    if bounds_area <= 0:
        return False
    if (view_box.w * view_box.h) / bounds_area > ZOOM_IN_AREA_RATIO:
        return False

    distance = math.hypot(
        view_box.x + view_box.w / 2 - (bounds.x + bounds.width / 2),
        view_box.y + view_box.h / 2 - (bounds.y + bounds.height / 2),
    )
    return distance <= math.hypot(bounds.width, bounds.height) * CENTER_DISTANCE_FACTOR


def should_trigger_zoom_out(view_box: SheetViewBox, scale: float, sheet_id: str) -> bool:
    """Whether the view has zoomed out past its content far enough to leave the sheet."""
    if sheet_id == "root":
        return False
    if scale > ZOOM_OUT_SCALE_THRESHOLD:
        return False

    visible_area = view_box.w * view_box.h
    if visible_area <= 0:
        return False
    return (view_box.orig_w * view_box.orig_h) / visible_area < ZOOM_OUT_COVERAGE_RATIO


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


def lerp_view_box(start: ViewBox, end: ViewBox, t: float) -> ViewBox:
    return ViewBox(
        x=start.x + (end.x - start.x) * t,
        y=start.y + (end.y - start.y) * t,
        w=start.w + (end.w - start.w) * t,
        h=start.h + (end.h - start.h) * t,
    )


def zoom_in_target(bounds: Bounds, padding: float = ZOOM_IN_PADDING) -> ViewBox:
    """Target box for entering a subgraph: its bounds plus ``padding`` on each side."""
    return ViewBox(
        x=bounds.x - bounds.width * padding,
        y=bounds.y - bounds.height * padding,
        w=bounds.width * (1 + padding * 2),
        h=bounds.height * (1 + padding * 2),
    )


def fit_child_view_box(view_box: SheetViewBox, container_width: float, container_height: float) -> ViewBox:
    """
    Fit a sheet's original box into the container at 90% of the limiting scale.

    The result keeps the container's aspect ratio and is centered on the
    sheet's original box.
    """
    width = container_width or 800
    height = container_height or 600
    scale = min(width / view_box.orig_w, height / view_box.orig_h) * FIT_RATIO
    w = width / scale
    h = height / scale
    return ViewBox(
        x=view_box.orig_x + (view_box.orig_w - w) / 2,
        y=view_box.orig_y + (view_box.orig_h - h) / 2,
        w=w,
        h=h,
    )


def position_parent_view_box(child_bounds: Bounds, container_width: float, container_height: float) -> ViewBox:
    """
    Parent view on return from a child: centered on the child's subgraph,
    showing twice its size, at the container's aspect ratio.
    """
    target_w = child_bounds.width * PARENT_CONTEXT_FACTOR
    target_h = child_bounds.height * PARENT_CONTEXT_FACTOR
    aspect = (container_width or 800) / (container_height or 600)

    if target_h > 0 and target_w / target_h > aspect:
        w, h = target_w, target_w / aspect
    else:
        w, h = target_h * aspect, target_h

    return ViewBox(
        x=child_bounds.x + child_bounds.width / 2 - w / 2,
        y=child_bounds.y + child_bounds.height / 2 - h / 2,
        w=w,
        h=h,
    )

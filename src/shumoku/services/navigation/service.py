"""
Zoom navigation between sheets.

A state machine that watches viewBox changes and, once input settles,
either dives into the drill-down subgraph under the pointer or returns
to the parent sheet. Transitions are animated; the visible sheet is
swapped at 80% of the animation.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from ...shared.infrastructure.monitoring import get_logger, get_metrics
from ...shared.models import ROOT_SHEET_ID
from .geometry import (
    ANIMATION_DURATION_MS, DEBOUNCE_MS, DOUBLE_CLICK_MS, SHEET_SWITCH_PROGRESS,
    calculate_scale, ease_out_cubic, fit_child_view_box, lerp_view_box,
    position_parent_view_box, should_trigger_zoom_in, should_trigger_zoom_out,
    zoom_in_target,
)
from .models import NavigationEvent, NavigationState, SheetInfo, SheetViewBox, SubgraphTarget, ViewBox
from .scheduler import FrameScheduler

WHEEL_FACTOR = 1.2
MIN_SCALE = 0.1
MAX_SCALE = 10.0

HitTest = Callable[[str, float, float], Optional[SubgraphTarget]]
SheetChangeCallback = Callable[[NavigationEvent], None]


class ZoomNavigator:
    """
    Zoom-driven navigation across a hierarchy of sheets.

    All coordinates are in diagram units of the visible sheet. At most one
    animation runs at a time; triggers arriving while one runs are ignored.

    Args:
        scheduler: Source of time, frames and timeouts
        sheets: Navigation data per sheet id; must contain ``root``
        on_sheet_change: Called whenever the visible sheet changes
        container: Display size ``(width, height)`` used to fit sheets
        hit_test: Finds the drill-down subgraph under a point of a sheet.
            Defaults to the innermost child sheet whose bounds contain it.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        sheets: Dict[str, SheetInfo],
        on_sheet_change: Optional[SheetChangeCallback] = None,
        container: Tuple[float, float] = (800, 600),
        hit_test: Optional[HitTest] = None,
    ):
        self.scheduler = scheduler
        self.sheets = sheets
        self.on_sheet_change = on_sheet_change
        self.container = container
        self.hit_test = hit_test or self._default_hit_test
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()

        self._current = ROOT_SHEET_ID if ROOT_SHEET_ID in sheets else next(iter(sheets), ROOT_SHEET_ID)
        self._state = NavigationState.IDLE
        self._frame_handle: Any = None
        self._settle_handle: Any = None
        self._last_point: Tuple[float, float] = (0.0, 0.0)
        self._last_click: Optional[Tuple[str, float]] = None
        self._destroyed = False

    # === State ===

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def is_animating(self) -> bool:
        return self._state != NavigationState.IDLE

    @property
    def current_sheet(self) -> str:
        return self._current

    @property
    def view_box(self) -> Optional[SheetViewBox]:
        """ViewBox of the visible sheet."""
        info = self.sheets.get(self._current)
        return info.view_box if info else None

    @property
    def breadcrumb(self) -> List[str]:
        """Sheet ids from the root down to the visible sheet."""
        trail: List[str] = []
        sheet_id: Optional[str] = self._current
        while sheet_id is not None and sheet_id not in trail:
            trail.insert(0, sheet_id)
            info = self.sheets.get(sheet_id)
            sheet_id = info.parent if info else None
        return trail

    # === Input events ===

    def set_view_box(self, x: float, y: float, w: float, h: float) -> None:
        """Replace the visible sheet's viewBox (pan or external zoom)."""
        view_box = self.view_box
        if self._destroyed or view_box is None or self.is_animating:
            return
        view_box.apply(ViewBox(x=x, y=y, w=w, h=h))

    def on_wheel(self, x: float, y: float, delta_y: float = 0.0) -> None:
        """
        Wheel input at ``(x, y)``.

        A non-zero ``delta_y`` zooms around the point (negative zooms in).
        The transition check runs once wheel input has been quiet for 150 ms.
        """
        if self._destroyed or self.is_animating:
            return
        if delta_y:
            self._zoom_at(x, y, 1 / WHEEL_FACTOR if delta_y > 0 else WHEEL_FACTOR)
        self._last_point = (x, y)
        self._arm_settle()

    def on_pinch(self, center_x: float, center_y: float, factor: float = 1.0) -> None:
        """Pinch motion around a center; ``factor`` above 1 zooms in."""
        if self._destroyed or self.is_animating:
            return
        if factor > 0 and factor != 1.0:
            self._zoom_at(center_x, center_y, factor)
        self._last_point = (center_x, center_y)
        self._cancel_settle()

    def on_pinch_end(self) -> None:
        """Pinch released; the transition check runs after the debounce."""
        if self._destroyed or self.is_animating:
            return
        self._arm_settle()

    def on_click(self, x: float, y: float, time_ms: Optional[float] = None) -> bool:
        """
        Click at ``(x, y)``.

        Two clicks on the same drill-down subgraph within 300 ms form a
        double-click, which runs the zoom-in check for that subgraph.

        Returns:
            True if a zoom-in animation started
        """
        if self._destroyed or self.is_animating:
            return False

        now = self.scheduler.now() if time_ms is None else time_ms
        target = self.hit_test(self._current, x, y)
        last = self._last_click
        self._last_click = (target.sheet_id, now) if target else None

        if target is None or last is None:
            return False
        if last[0] != target.sheet_id or now - last[1] > DOUBLE_CLICK_MS:
            return False

        self._last_click = None
        return self._try_zoom_in(target)

    def navigate(self, sheet_id: str) -> bool:
        """
        Show a sheet directly, without animation.

        Returns:
            False if the sheet is unknown or an animation is running
        """
        if self._destroyed or self.is_animating:
            return False
        if sheet_id not in self.sheets:
            self.logger.warning(f"Cannot navigate to unknown sheet '{sheet_id}'")
            return False
        self._cancel_settle()
        self._fit(sheet_id)
        self._switch_to(sheet_id, direction=None)
        return True

    def destroy(self) -> None:
        """Stop any running animation and pending timers; further input is ignored."""
        if self._frame_handle is not None:
            self.scheduler.cancel(self._frame_handle)
            self._frame_handle = None
        self._cancel_settle()
        self._state = NavigationState.IDLE
        self._destroyed = True

    # === Transition checks ===

    def _arm_settle(self) -> None:
        self._cancel_settle()
        self._settle_handle = self.scheduler.schedule_timeout(DEBOUNCE_MS, self._on_settled)

    def _cancel_settle(self) -> None:
        if self._settle_handle is not None:
            self.scheduler.cancel(self._settle_handle)
            self._settle_handle = None

    def _on_settled(self) -> None:
        self._settle_handle = None
        if self._destroyed or self.is_animating:
            return
        view_box = self.view_box
        if view_box is None:
            return

        target = self.hit_test(self._current, *self._last_point)
        if target is not None and self._try_zoom_in(target):
            return
        self._try_zoom_out()

    def _try_zoom_in(self, target: SubgraphTarget) -> bool:
        view_box = self.view_box
        if view_box is None or target.sheet_id not in self.sheets:
            return False
        if not should_trigger_zoom_in(view_box, target.bounds, calculate_scale(view_box)):
            return False

        self.logger.debug(f"Zooming into sheet '{target.sheet_id}' from '{self._current}'")

        def switch():
            self._fit(target.sheet_id)
            self._switch_to(target.sheet_id, direction="in")

        self._animate(view_box, zoom_in_target(target.bounds), NavigationState.ANIMATING_IN, switch)
        return True

    def _try_zoom_out(self) -> bool:
        view_box = self.view_box
        info = self.sheets.get(self._current)
        if view_box is None or info is None or info.parent not in self.sheets:
            return False
        if not should_trigger_zoom_out(view_box, calculate_scale(view_box), self._current):
            return False

        child_id, parent_id = self._current, info.parent
        self.logger.debug(f"Zooming out of sheet '{child_id}' to '{parent_id}'")

        def switch():
            parent_view = self.sheets[parent_id].view_box
            if info.bounds is not None and info.bounds.is_valid():
                parent_view.apply(position_parent_view_box(info.bounds, *self.container))
            else:
                parent_view.apply(fit_child_view_box(parent_view, *self.container))
            self._switch_to(parent_id, direction="out")

        self._animate(view_box, view_box.original(), NavigationState.ANIMATING_OUT, switch)
        return True

    # === Animation ===

    def _animate(self, view_box: SheetViewBox, target: ViewBox, state: NavigationState,
                 on_switch: Callable[[], None]) -> None:
        if self.is_animating:
            return

        self._state = state
        self._cancel_settle()
        start_time = self.scheduler.now()
        start = view_box.current()
        switched = False

        def step():
            nonlocal switched
            self._frame_handle = None
            if self._destroyed:
                return

            progress = min((self.scheduler.now() - start_time) / ANIMATION_DURATION_MS, 1.0)
            view_box.apply(lerp_view_box(start, target, ease_out_cubic(progress)))

            if not switched and progress >= SHEET_SWITCH_PROGRESS:
                switched = True
                on_switch()

            if progress < 1.0:
                self._frame_handle = self.scheduler.schedule_frame(step)
            else:
                self._state = NavigationState.IDLE
                self.metrics.counter("navigation_transitions", tags={'direction': state.value})

        self._frame_handle = self.scheduler.schedule_frame(step)

    # === Helpers ===

    def _zoom_at(self, x: float, y: float, factor: float) -> None:
        view_box = self.view_box
        if view_box is None or view_box.w <= 0 or view_box.h <= 0:
            return
        new_w, new_h = view_box.w / factor, view_box.h / factor
        scale = view_box.orig_w / new_w
        if scale < MIN_SCALE or scale > MAX_SCALE:
            return
        fx = (x - view_box.x) / view_box.w
        fy = (y - view_box.y) / view_box.h
        view_box.apply(ViewBox(x=x - new_w * fx, y=y - new_h * fy, w=new_w, h=new_h))

    def _fit(self, sheet_id: str) -> None:
        view_box = self.sheets[sheet_id].view_box
        view_box.apply(fit_child_view_box(view_box, *self.container))

    def _switch_to(self, sheet_id: str, direction: Optional[str]) -> None:
        previous = self._current
        self._current = sheet_id
        self._last_click = None
        self.logger.info(f"Showing sheet '{sheet_id}'")
        if self.on_sheet_change is not None:
            self.on_sheet_change(NavigationEvent(sheet_id=sheet_id, previous=previous, direction=direction))

    def _default_hit_test(self, sheet_id: str, x: float, y: float) -> Optional[SubgraphTarget]:
        """Innermost child sheet of ``sheet_id`` whose subgraph contains the point."""
        best: Optional[SubgraphTarget] = None
        for child_id, info in self.sheets.items():
            bounds = info.bounds
            if info.parent != sheet_id or bounds is None or not bounds.is_valid():
                continue
            inside = bounds.x <= x <= bounds.x + bounds.width and bounds.y <= y <= bounds.y + bounds.height
            if inside and (best is None or bounds.area < best.bounds.area):
                best = SubgraphTarget(sheet_id=child_id, bounds=bounds)
        return best

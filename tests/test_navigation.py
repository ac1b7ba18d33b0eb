"""
Tests for the zoom navigation state machine.
"""

import asyncio

import pytest

from shumoku.services.navigation import (
    AsyncioScheduler, ManualScheduler, NavigationState, SheetInfo, SheetViewBox,
    ViewBox, ZoomNavigator, build_sheet_infos, calculate_scale, ease_out_cubic,
    fit_child_view_box, lerp_view_box, position_parent_view_box,
    should_trigger_zoom_in, should_trigger_zoom_out, zoom_in_target,
)
from shumoku.shared.infrastructure.monitoring import get_metrics
from shumoku.shared.models import Bounds, LayoutResult, LayoutSubgraph, Subgraph


DC1_BOUNDS = Bounds(x=100, y=100, width=200, height=150)


def make_sheets():
    return {
        "root": SheetInfo(view_box=SheetViewBox.from_bounds(Bounds(x=0, y=0, width=1000, height=800))),
        "dc1": SheetInfo(
            view_box=SheetViewBox.from_bounds(Bounds(x=0, y=0, width=400, height=300)),
            parent="root",
            bounds=DC1_BOUNDS,
            label="Data Center 1",
        ),
    }


@pytest.fixture
def events():
    return []


@pytest.fixture
def navigator(scheduler, events):
    return ZoomNavigator(scheduler, make_sheets(), on_sheet_change=events.append)


def close_in_on_dc1(navigator):
    # exactly the zoom-in target of dc1: scale > 1.5, area ratio 1.44, centered
    navigator.set_view_box(80, 85, 240, 180)


# === Geometry ===

class TestGeometry:

    def test_scale(self):
        view_box = SheetViewBox.from_bounds(Bounds(x=0, y=0, width=1000, height=800))
        assert calculate_scale(view_box) == 1.0
        view_box.apply(ViewBox(x=0, y=0, w=500, h=400))
        assert calculate_scale(view_box) == 2.0

    def test_invalid_bounds_fall_back_to_default(self):
        view_box = SheetViewBox.from_bounds(Bounds(x=0, y=0, width=0, height=10))
        assert (view_box.orig_w, view_box.orig_h) == (800, 600)
        assert SheetViewBox.from_bounds(None).w == 800

    def test_zoom_in_target_pads_ten_percent(self):
        target = zoom_in_target(DC1_BOUNDS)
        assert (target.x, target.y, target.w, target.h) == pytest.approx((80, 85, 240, 180))

    def test_zoom_in_conditions(self):
        view_box = SheetViewBox.from_bounds(Bounds(x=0, y=0, width=1000, height=800))
        view_box.apply(ViewBox(x=80, y=85, w=240, h=180))

        assert should_trigger_zoom_in(view_box, DC1_BOUNDS, calculate_scale(view_box))
        # scale below threshold
        assert not should_trigger_zoom_in(view_box, DC1_BOUNDS, 1.4)
        # view far away from the subgraph center
        view_box.apply(ViewBox(x=600, y=500, w=240, h=180))
        assert not should_trigger_zoom_in(view_box, DC1_BOUNDS, calculate_scale(view_box))
        # visible area more than twice the subgraph area
        view_box.apply(ViewBox(x=0, y=0, w=600, h=400))
        assert not should_trigger_zoom_in(view_box, DC1_BOUNDS, 1.66)

    def test_zoom_in_scale_threshold_is_inclusive(self):
        view_box = SheetViewBox.from_bounds(Bounds(x=0, y=0, width=360, height=270))
        view_box.apply(ViewBox(x=80, y=85, w=240, h=180))
        assert calculate_scale(view_box) == 1.5
        assert should_trigger_zoom_in(view_box, DC1_BOUNDS, 1.5)

    def test_zoom_out_conditions(self):
        view_box = SheetViewBox.from_bounds(Bounds(x=0, y=0, width=400, height=300))
        view_box.apply(ViewBox(x=-1000, y=-800, w=2000, h=1600))

        assert should_trigger_zoom_out(view_box, calculate_scale(view_box), "dc1")
        assert not should_trigger_zoom_out(view_box, calculate_scale(view_box), "root")
        assert not should_trigger_zoom_out(view_box, 0.5, "dc1")

    def test_zoom_out_needs_low_coverage(self):
        view_box = SheetViewBox.from_bounds(Bounds(x=0, y=0, width=400, height=300))
        # narrow but very tall: scale 0.25 while content still covers the view
        view_box.apply(ViewBox(x=0, y=0, w=1600, h=100))
        assert not should_trigger_zoom_out(view_box, calculate_scale(view_box), "dc1")

    def test_easing(self):
        assert ease_out_cubic(0) == 0
        assert ease_out_cubic(1) == 1
        assert ease_out_cubic(0.5) == pytest.approx(0.875)

    def test_lerp(self):
        start = ViewBox(x=0, y=0, w=100, h=100)
        end = ViewBox(x=100, y=50, w=200, h=300)
        assert lerp_view_box(start, end, 0.5) == ViewBox(x=50, y=25, w=150, h=200)

    def test_fit_child_view_box(self):
        view_box = SheetViewBox.from_bounds(Bounds(x=0, y=0, width=400, height=300))
        fitted = fit_child_view_box(view_box, 800, 600)
        assert fitted.w == pytest.approx(400 / 0.9)
        assert fitted.h == pytest.approx(300 / 0.9)
        # centered on the original box
        assert fitted.x + fitted.w / 2 == pytest.approx(200)
        assert fitted.y + fitted.h / 2 == pytest.approx(150)

    def test_position_parent_view_box(self):
        placed = position_parent_view_box(DC1_BOUNDS, 800, 600)
        assert placed.w == pytest.approx(400)
        assert placed.h == pytest.approx(300)
        assert placed.x + placed.w / 2 == pytest.approx(200)
        assert placed.y + placed.h / 2 == pytest.approx(175)

    def test_build_sheet_infos(self):
        layouts = {
            "root": LayoutResult(
                bounds=Bounds(x=0, y=0, width=1000, height=800),
                subgraphs={"dc1": LayoutSubgraph(id="dc1", bounds=DC1_BOUNDS, subgraph=Subgraph(id="dc1"))},
            ),
            "dc1": LayoutResult(bounds=Bounds(x=0, y=0, width=400, height=300)),
            "dc1/x": LayoutResult(),
        }
        infos = build_sheet_infos(layouts, {"dc1": "Data Center 1"})

        assert infos["root"].parent is None
        assert infos["dc1"].parent == "root"
        assert infos["dc1"].bounds == DC1_BOUNDS
        assert infos["dc1"].label == "Data Center 1"
        assert infos["dc1/x"].parent == "dc1"
        assert infos["dc1/x"].bounds is None
        assert infos["dc1/x"].view_box.w == 800


# === State machine ===

class TestZoomNavigator:

    def test_initial_state(self, navigator):
        assert navigator.current_sheet == "root"
        assert navigator.state == NavigationState.IDLE
        assert navigator.breadcrumb == ["root"]

    def test_wheel_zooms_around_point(self, navigator):
        navigator.on_wheel(500, 400, delta_y=-1)
        view_box = navigator.view_box
        assert view_box.w == pytest.approx(1000 / 1.2)
        assert view_box.x == pytest.approx(500 - view_box.w / 2)
        assert view_box.y == pytest.approx(400 - view_box.h / 2)

    def test_wheel_zoom_is_clamped(self, navigator):
        navigator.set_view_box(0, 0, 9000, 7200)
        navigator.on_wheel(500, 400, delta_y=1)
        assert navigator.view_box.w == 9000

    def test_settle_is_debounced(self, navigator, scheduler):
        close_in_on_dc1(navigator)
        navigator.on_wheel(200, 175)
        scheduler.advance(100)
        navigator.on_wheel(200, 175)
        scheduler.advance(100)
        assert navigator.state == NavigationState.IDLE

        scheduler.advance(50)
        assert navigator.state == NavigationState.ANIMATING_IN

    def test_zoom_in_switches_at_eighty_percent(self, navigator, scheduler, events):
        close_in_on_dc1(navigator)
        navigator.on_wheel(200, 175)
        scheduler.advance(150)
        assert navigator.is_animating

        # animation started at t=150; 80% of 450 ms is reached at t=510
        scheduler.advance(350)
        assert navigator.current_sheet == "root"

        scheduler.advance(20)
        assert navigator.current_sheet == "dc1"
        assert navigator.state == NavigationState.ANIMATING_IN
        assert events[0].sheet_id == "dc1"
        assert events[0].previous == "root"
        assert events[0].direction == "in"

        scheduler.run_until_idle()
        assert navigator.state == NavigationState.IDLE
        assert navigator.breadcrumb == ["root", "dc1"]
        assert get_metrics().get_counter("navigation_transitions") == 1

    def test_zoom_in_fits_child_sheet(self, navigator, scheduler):
        close_in_on_dc1(navigator)
        navigator.on_wheel(200, 175)
        scheduler.run_until_idle()

        view_box = navigator.view_box
        assert view_box.w == pytest.approx(400 / 0.9)
        assert view_box.x + view_box.w / 2 == pytest.approx(200)

    def test_root_animation_reaches_target(self, navigator, scheduler):
        close_in_on_dc1(navigator)
        navigator.on_wheel(200, 175)
        scheduler.run_until_idle()
        view_box = navigator.sheets["root"].view_box
        target = zoom_in_target(DC1_BOUNDS)
        assert (view_box.x, view_box.w) == pytest.approx((target.x, target.w))

    def test_no_zoom_in_when_not_close(self, navigator, scheduler):
        navigator.on_wheel(200, 175)
        scheduler.advance(200)
        assert navigator.state == NavigationState.IDLE
        assert navigator.current_sheet == "root"

    def test_zoom_out_returns_to_parent(self, navigator, scheduler, events):
        navigator.navigate("dc1")
        navigator.set_view_box(-1000, -800, 2000, 1600)
        navigator.on_wheel(0, 0)
        scheduler.advance(150)
        assert navigator.state == NavigationState.ANIMATING_OUT

        scheduler.run_until_idle()
        assert navigator.current_sheet == "root"
        assert events[-1].direction == "out"

        # parent shows the child's subgraph at twice its size
        root_view = navigator.view_box
        assert root_view.w == pytest.approx(400)
        assert root_view.h == pytest.approx(300)
        assert root_view.x + root_view.w / 2 == pytest.approx(200)

    def test_root_never_zooms_out(self, navigator, scheduler):
        navigator.set_view_box(-5000, -4000, 9000, 7200)
        navigator.on_wheel(0, 0)
        scheduler.advance(200)
        assert navigator.state == NavigationState.IDLE
        assert navigator.current_sheet == "root"

    def test_input_ignored_while_animating(self, navigator, scheduler):
        close_in_on_dc1(navigator)
        navigator.on_wheel(200, 175)
        scheduler.advance(150)
        assert navigator.is_animating

        assert navigator.navigate("dc1") is False
        assert navigator.on_click(200, 175, time_ms=160) is False
        navigator.set_view_box(0, 0, 10, 10)
        assert navigator.view_box.w != 10

    def test_pinch_cancels_pending_check(self, navigator, scheduler):
        close_in_on_dc1(navigator)
        navigator.on_wheel(200, 175)
        navigator.on_pinch(200, 175)
        assert scheduler.pending == 0

        navigator.on_pinch_end()
        scheduler.advance(150)
        assert navigator.state == NavigationState.ANIMATING_IN

    def test_double_click_zooms_in(self, navigator):
        close_in_on_dc1(navigator)
        assert navigator.on_click(200, 175, time_ms=1000) is False
        assert navigator.on_click(200, 175, time_ms=1200) is True
        assert navigator.state == NavigationState.ANIMATING_IN

    def test_slow_clicks_are_not_a_double_click(self, navigator):
        close_in_on_dc1(navigator)
        navigator.on_click(200, 175, time_ms=1000)
        assert navigator.on_click(200, 175, time_ms=1400) is False
        assert navigator.state == NavigationState.IDLE

    def test_double_click_outside_subgraph(self, navigator):
        close_in_on_dc1(navigator)
        navigator.on_click(900, 700, time_ms=0)
        assert navigator.on_click(900, 700, time_ms=100) is False

    def test_double_click_still_needs_zoom(self, navigator):
        navigator.on_click(200, 175, time_ms=0)
        assert navigator.on_click(200, 175, time_ms=100) is False

    def test_navigate(self, navigator, events):
        assert navigator.navigate("dc1") is True
        assert navigator.current_sheet == "dc1"
        assert events[-1].direction is None
        assert navigator.navigate("missing") is False
        assert navigator.current_sheet == "dc1"

    def test_destroy_cancels_animation(self, navigator, scheduler):
        close_in_on_dc1(navigator)
        navigator.on_wheel(200, 175)
        scheduler.advance(200)
        assert navigator.is_animating

        navigator.destroy()
        assert navigator.state == NavigationState.IDLE
        assert scheduler.pending == 0

        scheduler.advance(1000)
        assert navigator.current_sheet == "root"
        navigator.on_wheel(200, 175)
        assert scheduler.pending == 0

    def test_innermost_subgraph_wins(self, scheduler):
        sheets = make_sheets()
        sheets["rack"] = SheetInfo(
            view_box=SheetViewBox.from_bounds(None),
            parent="root",
            bounds=Bounds(x=150, y=150, width=50, height=50),
        )
        navigator = ZoomNavigator(scheduler, sheets)
        assert navigator.hit_test("root", 175, 175).sheet_id == "rack"
        assert navigator.hit_test("root", 120, 120).sheet_id == "dc1"
        assert navigator.hit_test("dc1", 175, 175) is None


@pytest.mark.asyncio
async def test_asyncio_scheduler_runs_callbacks():
    scheduler = AsyncioScheduler()
    fired = []

    scheduler.schedule_timeout(10, lambda: fired.append("timeout"))
    scheduler.schedule_frame(lambda: fired.append("frame"))
    cancelled = scheduler.schedule_timeout(10, lambda: fired.append("cancelled"))
    scheduler.cancel(cancelled)

    await asyncio.sleep(0.05)
    assert sorted(fired) == ["frame", "timeout"]


def test_manual_scheduler_orders_callbacks():
    scheduler = ManualScheduler()
    fired = []
    scheduler.schedule_timeout(20, lambda: fired.append("late"))
    scheduler.schedule_frame(lambda: fired.append("frame"))
    scheduler.schedule_timeout(0, lambda: fired.append("now"))

    scheduler.advance(16)
    assert fired == ["now", "frame"]
    scheduler.advance(4)
    assert fired == ["now", "frame", "late"]
    assert scheduler.now() == 20

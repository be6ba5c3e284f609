import pytest
from PySide6.QtTest import QTest

from planviewer.config import MARGIN, MAX_SCALE, MIN_SCALE
from planviewer.controller.viewport_controller import ViewportController
from planviewer.model.scales import build_scale_mapping
from planviewer.model.viewport import Viewport


@pytest.fixture
def controller(qapp):
    c = ViewportController()
    c.set_canvas_size(800, 600)
    return c


def record(signal):
    events = []
    signal.connect(lambda value: events.append(value))
    return events


class TestZoom:
    def test_anchor_stays_in_place(self, controller):
        controller.pan_by(37, -12)
        before = controller.viewport.to_canvas(300, 200)

        controller.zoom_at_point(1.5, 300, 200)

        after = controller.viewport.to_screen(*before)
        assert after == pytest.approx((300, 200))
        assert controller.viewport.scale == pytest.approx(1.5)

    def test_zoom_in_and_out_use_canvas_centre(self, controller):
        controller.zoom_in()
        assert controller.viewport.scale == pytest.approx(1.2)
        assert controller.viewport.to_canvas(400, 300) == pytest.approx((400, 300))

        controller.zoom_out()
        assert controller.viewport.scale == pytest.approx(0.96)
        assert controller.viewport.to_canvas(400, 300) == pytest.approx((400, 300))

    def test_scale_is_clamped(self, controller):
        for _ in range(30):
            controller.zoom_in()
        assert controller.viewport.scale == MAX_SCALE

        for _ in range(60):
            controller.zoom_out()
        assert controller.viewport.scale == MIN_SCALE

    def test_no_canvas_is_a_no_op(self, qapp):
        c = ViewportController()
        changed = record(c.viewport_changed)
        c.zoom_in()
        c.pan_by(5, 5)
        assert c.viewport == Viewport()
        assert changed == []


class TestWheel:
    def test_direction(self, controller):
        assert controller.wheel(120, 100, 100, now=0.0)
        assert controller.viewport.scale == pytest.approx(0.9)
        assert controller.wheel(-120, 100, 100, now=1.0)
        assert controller.viewport.scale == pytest.approx(0.99)

    def test_throttled(self, controller):
        assert controller.wheel(-120, 100, 100, now=0.000)
        assert not controller.wheel(-120, 100, 100, now=0.010)
        assert controller.viewport.scale == pytest.approx(1.1)
        assert controller.wheel(-120, 100, 100, now=0.025)
        assert controller.viewport.scale == pytest.approx(1.21)

    def test_zero_delta_ignored(self, controller):
        assert not controller.wheel(0, 100, 100, now=0.0)
        assert controller.viewport == Viewport()


class TestCommit:
    def test_commit_is_debounced(self, controller):
        changed = record(controller.viewport_changed)
        committed = record(controller.viewport_committed)

        controller.zoom_in()
        controller.zoom_in()
        controller.zoom_in()
        assert len(changed) == 3
        assert committed == []
        assert controller.zoom_percent == 100

        QTest.qWait(300)
        assert len(committed) == 1
        assert committed[0] == controller.viewport
        assert controller.zoom_percent == 173

    def test_pan_commits_on_demand(self, controller):
        committed = record(controller.viewport_committed)
        controller.pan_by(10, 20)
        assert committed == []
        controller.commit_now()
        assert committed == [Viewport(1.0, 10.0, 20.0)]

    def test_reset_view_commits_immediately(self, controller):
        controller.zoom_in()
        controller.commit_now()
        committed = record(controller.viewport_committed)

        controller.reset_view()

        assert controller.viewport == Viewport()
        assert committed == [Viewport()]
        assert controller.zoom_percent == 100


class TestFitToScreen:
    @staticmethod
    def screen_box(controller, mapping):
        (x0, x1), (y0, y1) = mapping.x_domain, mapping.y_domain
        corners = [controller.viewport.to_screen(*mapping.to_canvas(x, y)) for x in (x0, x1) for y in (y0, y1)]
        xs = [p[0] for p in corners]
        ys = [p[1] for p in corners]
        return min(xs), max(xs), min(ys), max(ys)

    def test_square_domain(self, controller):
        mapping = build_scale_mapping((0, 100), (0, 100), 800, 600)
        controller.set_mapping(mapping)

        assert controller.fit_to_screen()

        vp = controller.viewport
        assert vp.scale == pytest.approx(0.9)
        assert (vp.translate_x, vp.translate_y) == pytest.approx((40, 30))

    @pytest.mark.parametrize("x_domain,y_domain", [
        ((3, 97), (0, 41)),
        ((-250, 1730), (12, 14)),
        ((0.5, 0.75), (-3, 900)),
    ])
    def test_content_fits_inside_margins_and_is_centred(self, controller, x_domain, y_domain):
        mapping = build_scale_mapping(x_domain, y_domain, 800, 600)
        controller.set_mapping(mapping)

        assert controller.fit_to_screen()

        left, right, top, bottom = self.screen_box(controller, mapping)
        assert left >= MARGIN - 1e-9 and right <= 800 - MARGIN + 1e-9
        assert top >= MARGIN - 1e-9 and bottom <= 600 - MARGIN + 1e-9
        assert (left + right) / 2 == pytest.approx(400)
        assert (top + bottom) / 2 == pytest.approx(300)

    def test_degenerate_domain_is_a_no_op(self, controller):
        controller.set_mapping(build_scale_mapping((5, 5), (0, 100), 800, 600))
        controller.pan_by(3, 3)
        before = controller.viewport

        assert not controller.fit_to_screen()
        assert controller.viewport == before

    def test_without_mapping(self, controller):
        assert not controller.fit_to_screen()

    def test_zero_canvas(self, qapp):
        c = ViewportController()
        c.set_mapping(build_scale_mapping((0, 100), (0, 100), 800, 600))
        assert not c.fit_to_screen()
        assert c.viewport == Viewport()


class TestSelectionMode:
    def test_toggle_emits(self, controller):
        modes = record(controller.selection_mode_changed)
        assert controller.toggle_selection_mode() is True
        assert controller.toggle_selection_mode() is False
        assert modes == [True, False]

    def test_reset_leaves_selection_mode(self, controller):
        controller.toggle_selection_mode()
        controller.zoom_in()
        controller.reset()
        assert not controller.selection_mode
        assert controller.committed_viewport == Viewport()

"""
Viewport Controller
===================
Owns the pan/zoom state of the plan canvas.

Why is this file needed?
------------------------
1. Single writer: The Viewport is read by the renderers and the selection
   engine but only this class ever replaces it.
2. Responsiveness: Visual updates are emitted on every input event
   (`viewport_changed`), while `viewport_committed` is debounced so dependent
   recomputation (grid phase, zoom label) only runs once input settles.

Classes:
    ViewportController: zoom-at-point, reset, fit-to-screen, selection mode.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from planviewer.config import (
    ZOOM_IN_FACTOR, ZOOM_OUT_FACTOR, WHEEL_ZOOM_IN_FACTOR, WHEEL_ZOOM_OUT_FACTOR,
    WHEEL_THROTTLE_MS, WHEEL_COMMIT_DELAY_MS, BUTTON_COMMIT_DELAY_MS, FIT_PADDING,
)
from planviewer.controller.timing import RateLimiter, TrailingDebounce
from planviewer.model.scales import ScaleMapping
from planviewer.model.viewport import Viewport, clamp_scale

logger = logging.getLogger(__name__)


class ViewportController(QObject):
    viewport_changed = Signal(object)     # every visual update
    viewport_committed = Signal(object)   # once input settles
    selection_mode_changed = Signal(bool)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._viewport = Viewport()
        self._committed = Viewport()
        self._width: int = 0
        self._height: int = 0
        self._mapping: Optional[ScaleMapping] = None
        self._selection_mode: bool = False

        self._wheel_limiter = RateLimiter(WHEEL_THROTTLE_MS)
        self._commit_timer = TrailingDebounce(BUTTON_COMMIT_DELAY_MS, self)
        self._commit_timer.triggered.connect(self._commit)

    # ------------------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------------------

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def committed_viewport(self) -> Viewport:
        return self._committed

    @property
    def zoom_percent(self) -> int:
        return self._committed.zoom_percent

    @property
    def selection_mode(self) -> bool:
        return self._selection_mode

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self._width, self._height

    @property
    def canvas_ready(self) -> bool:
        return self._width > 0 and self._height > 0

    # ------------------------------------------------------------------------------
    # Inputs from the session
    # ------------------------------------------------------------------------------

    def set_canvas_size(self, width: int, height: int) -> None:
        self._width = max(0, int(width))
        self._height = max(0, int(height))

    def set_mapping(self, mapping: Optional[ScaleMapping]) -> None:
        self._mapping = mapping

    # ------------------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------------------

    def zoom_at_point(
        self,
        factor: float,
        anchor_x: float,
        anchor_y: float,
        commit_delay_ms: int = BUTTON_COMMIT_DELAY_MS,
    ) -> None:
        """
        Zoom by `factor` keeping whatever is under (anchor_x, anchor_y) in place.
        """
        if not self.canvas_ready:
            return
        vp = self._viewport
        point_x, point_y = vp.to_canvas(anchor_x, anchor_y)
        new_scale = clamp_scale(vp.scale * factor)
        self._apply(
            Viewport(
                scale=new_scale,
                translate_x=anchor_x - point_x * new_scale,
                translate_y=anchor_y - point_y * new_scale,
            ),
            commit_delay_ms,
        )

    def zoom_in(self) -> None:
        self.zoom_at_point(ZOOM_IN_FACTOR, self._width / 2, self._height / 2)

    def zoom_out(self) -> None:
        self.zoom_at_point(ZOOM_OUT_FACTOR, self._width / 2, self._height / 2)

    def wheel(self, delta_y: float, anchor_x: float, anchor_y: float, now: Optional[float] = None) -> bool:
        """
        Wheel zoom around the pointer. Scrolling down (delta_y > 0) zooms out.

        Returns:
            False if the event was throttled or the canvas is not ready.
        """
        if not self.canvas_ready or delta_y == 0:
            return False
        if not self._wheel_limiter.allow(now):
            return False
        factor = WHEEL_ZOOM_OUT_FACTOR if delta_y > 0 else WHEEL_ZOOM_IN_FACTOR
        self.zoom_at_point(factor, anchor_x, anchor_y, commit_delay_ms=WHEEL_COMMIT_DELAY_MS)
        return True

    def pan_by(self, dx: float, dy: float) -> None:
        """Drag the view. Committed when the drag ends via `commit_now()`."""
        if not self.canvas_ready or (dx == 0 and dy == 0):
            return
        vp = self._viewport
        self._viewport = Viewport(vp.scale, vp.translate_x + dx, vp.translate_y + dy)
        self.viewport_changed.emit(self._viewport)

    def reset_view(self) -> None:
        if not self.canvas_ready:
            return
        logger.debug("Viewport reset.")
        self._apply(Viewport(), commit_delay_ms=0)

    def fit_to_screen(self) -> bool:
        """
        Scale and centre the visible content inside the canvas.

        Returns:
            False (and leaves the viewport untouched) when there is nothing to
            fit: no canvas, no mapping, or a zero-width / zero-height domain.
        """
        if not self.canvas_ready or self._mapping is None:
            return False

        data_w, data_h = self._mapping.data_extent
        if data_w == 0 or data_h == 0:
            logger.debug("Fit to screen skipped: degenerate domain.")
            return False

        margin = self._mapping.margin
        mapped_w, mapped_h = self._mapping.mapped_extent
        if mapped_w == 0 or mapped_h == 0:
            return False

        scale = FIT_PADDING * min(
            (self._width - 2 * margin) / mapped_w,
            (self._height - 2 * margin) / mapped_h,
        )
        if scale <= 0:
            return False
        scale = clamp_scale(scale)

        center_x, center_y = self._mapping.mapped_center
        self._apply(
            Viewport(
                scale=scale,
                translate_x=self._width / 2 - center_x * scale,
                translate_y=self._height / 2 - center_y * scale,
            ),
            BUTTON_COMMIT_DELAY_MS,
        )
        logger.info(f"Fit to screen at {round(scale * 100)}%.")
        return True

    def toggle_selection_mode(self) -> bool:
        self.set_selection_mode(not self._selection_mode)
        return self._selection_mode

    def set_selection_mode(self, active: bool) -> None:
        if active == self._selection_mode:
            return
        self._selection_mode = active
        logger.debug(f"Selection mode {'on' if active else 'off'}.")
        self.selection_mode_changed.emit(active)

    def reset(self) -> None:
        """Back to the initial state; used when a new document is loaded."""
        self._wheel_limiter.reset()
        self.set_selection_mode(False)
        self._apply(Viewport(), commit_delay_ms=0)

    def commit_now(self) -> None:
        if self._commit_timer.is_pending:
            self._commit_timer.flush()
        else:
            self._commit()

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _apply(self, viewport: Viewport, commit_delay_ms: int) -> None:
        self._viewport = viewport
        self.viewport_changed.emit(viewport)
        if commit_delay_ms <= 0:
            self.commit_now()
        else:
            self._commit_timer.schedule(commit_delay_ms)

    def _commit(self) -> None:
        if self._committed == self._viewport:
            return
        self._committed = self._viewport
        self.viewport_committed.emit(self._committed)

"""
Plan Canvas Widget
==================
Pannable, zoomable view of the plan with rectangle selection.

Why is this file needed?
------------------------
1. Rendering: It composes the cached background image (BackgroundLayer) with
   the per-frame vector overlay (route lines and the selection rectangle).
2. Input: It forwards mouse, wheel and resize events to the PlanSession and
   never changes the viewport itself.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QLineF, QPointF, QRectF, Qt
from PySide6.QtGui import (
    QColor, QMouseEvent, QPainter, QPaintEvent, QPen, QResizeEvent, QWheelEvent, QBrush,
)
from PySide6.QtWidgets import QSizePolicy, QWidget

from planviewer.config import (
    BACKGROUND_COLOR, CATEGORY_COLORS, ROUTE_LINE_WIDTH, SELECTED_ROUTE_COLOR,
    SELECTED_ROUTE_LINE_WIDTH, SELECTION_FILL, SELECTION_STROKE,
)
from planviewer.controller.session import PlanSession
from planviewer.model.geometry_primitives import Category
from planviewer.view.widgets.background_layer import BackgroundLayer, rgba

logger = logging.getLogger(__name__)


class PlanCanvas(QWidget):
    def __init__(self, session: PlanSession, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.session = session

        self.setMouseTracking(False)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMinimumSize(200, 200)
        self.setAttribute(Qt.WA_OpaquePaintEvent, True)

        # --- Renderer-owned resources ---
        self._background = BackgroundLayer()
        self._route_lines: list[QLineF] = []
        self._route_lines_key: Optional[tuple] = None

        # --- Signal connections ---
        session.document_changed.connect(self._on_scene_changed)
        session.layers_changed.connect(self._on_scene_changed)
        session.mapping_changed.connect(self._on_scene_changed)
        session.viewport.viewport_changed.connect(self._on_view_changed)
        session.viewport.viewport_committed.connect(self._on_view_changed)
        session.viewport.selection_mode_changed.connect(self._on_selection_mode_changed)
        session.selection.rect_changed.connect(self._on_view_changed)
        session.selection.selection_changed.connect(self._on_view_changed)

        self._on_selection_mode_changed(session.selection_mode)

    @property
    def background(self) -> BackgroundLayer:
        return self._background

    # ------------------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------------------

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        self.session.set_canvas_size(event.size().width(), event.size().height())

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        try:
            painter.fillRect(self.rect(), QColor(BACKGROUND_COLOR))
            mapping = self.session.mapping
            if mapping is None:
                return

            committed = self.session.viewport.committed_viewport
            self._background.ensure(
                mapping.width,
                mapping.height,
                mapping,
                self.session.visible_background(),
                translate=(committed.translate_x, committed.translate_y),
            )

            vp = self.session.viewport.viewport
            painter.save()
            painter.translate(vp.translate_x, vp.translate_y)
            painter.scale(vp.scale, vp.scale)

            if self._background.image is not None:
                painter.drawImage(QPointF(0, 0), self._background.image)

            self._paint_routes(painter)
            painter.restore()

            self._paint_selection_rect(painter)
        finally:
            painter.end()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.LeftButton:
            super().mousePressEvent(event)
            return
        pos = event.position()
        self.session.pointer_pressed(pos.x(), pos.y())
        if not self.session.selection_mode:
            self.setCursor(Qt.ClosedHandCursor)
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if not event.buttons() & Qt.LeftButton:
            super().mouseMoveEvent(event)
            return
        pos = event.position()
        self.session.pointer_moved(pos.x(), pos.y())
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.LeftButton:
            super().mouseReleaseEvent(event)
            return
        pos = event.position()
        self.session.pointer_released(pos.x(), pos.y())
        self._on_selection_mode_changed(self.session.selection_mode)
        event.accept()

    def wheelEvent(self, event: QWheelEvent) -> None:
        dy = event.angleDelta().y()
        if not dy:
            super().wheelEvent(event)
            return
        pos = event.position()
        # Qt reports wheel-forward as positive, the controller expects scroll-down positive
        self.session.wheel(-dy, pos.x(), pos.y())
        event.accept()

    # ------------------------------------------------------------------------------
    # Overlay
    # ------------------------------------------------------------------------------

    def _ensure_route_lines(self) -> list[QLineF]:
        mapping = self.session.mapping
        coords = self.session.visible_route_coords()
        key = (mapping, id(coords), len(coords))
        if key != self._route_lines_key:
            if mapping is None or len(coords) == 0:
                self._route_lines = []
            else:
                mapped = mapping.map_segments(coords)
                self._route_lines = [QLineF(x1, y1, x2, y2) for x1, y1, x2, y2 in mapped.tolist()]
            self._route_lines_key = key
        return self._route_lines

    def _paint_routes(self, painter: QPainter) -> None:
        lines = self._ensure_route_lines()
        if not lines:
            return
        selected = set(self.session.selected)
        painter.setRenderHint(QPainter.Antialiasing, True)

        pen = QPen(QColor(CATEGORY_COLORS[Category.ROUTE.value]), ROUTE_LINE_WIDTH)
        pen.setCapStyle(Qt.RoundCap)
        pen.setJoinStyle(Qt.RoundJoin)
        painter.setPen(pen)
        if selected:
            painter.drawLines([line for i, line in enumerate(lines) if i not in selected])
        else:
            painter.drawLines(lines)

        if selected:
            pen.setColor(QColor(SELECTED_ROUTE_COLOR))
            pen.setWidthF(SELECTED_ROUTE_LINE_WIDTH)
            painter.setPen(pen)
            painter.drawLines([lines[i] for i in sorted(selected) if i < len(lines)])

    def _paint_selection_rect(self, painter: QPainter) -> None:
        rect = self.session.selection.rect
        if not (self.session.selection_mode and rect.visible):
            return
        pen = QPen(QColor(SELECTION_STROKE), 1)
        pen.setDashPattern([5, 5])
        painter.setPen(pen)
        painter.setBrush(QBrush(rgba(SELECTION_FILL)))
        painter.drawRect(QRectF(rect.x, rect.y, rect.width, rect.height))

    # ------------------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------------------

    def _on_scene_changed(self, *_: object) -> None:
        self._background.invalidate()
        self._route_lines_key = None
        self.update()

    def _on_view_changed(self, *_: object) -> None:
        self.update()

    def _on_selection_mode_changed(self, active: bool) -> None:
        self.setCursor(Qt.CrossCursor if active else Qt.OpenHandCursor)
        self.update()

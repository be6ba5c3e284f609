"""
Background Layer
Rasterizes the grid and the non-interactive categories into an offscreen image.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence, TYPE_CHECKING

from PySide6.QtCore import QLineF, Qt
from PySide6.QtGui import QColor, QImage, QPainter, QPen

from planviewer.config import (
    BACKGROUND_COLOR, GRID_COLOR, GRID_LINE_WIDTH, GRID_SIZE, BACKGROUND_LINE_WIDTH, CATEGORY_COLORS,
)
from planviewer.model.geometry_primitives import Category

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt
    from planviewer.model.scales import ScaleMapping

logger = logging.getLogger(__name__)


def rgba(color: tuple[int, int, int, float]) -> QColor:
    r, g, b, a = color
    return QColor(r, g, b, round(a * 255))


class BackgroundLayer:
    """
    Owner of the offscreen background image.

    `ensure()` repaints only when something that affects the pixels changed:
    canvas size, scale mapping, the set of visible background arrays or the
    grid phase (pan translation modulo the grid size). Zooming alone never
    triggers a repaint.
    """
    def __init__(self, grid_size: int = GRID_SIZE) -> None:
        self.grid_size = grid_size
        self._image: Optional[QImage] = None
        self._signature: Optional[tuple] = None
        self.repaint_count: int = 0

    @property
    def image(self) -> Optional[QImage]:
        return self._image

    def invalidate(self) -> None:
        self._signature = None

    def ensure(
        self,
        width: int,
        height: int,
        mapping: Optional[ScaleMapping],
        layers: Sequence[tuple[Category, npt.NDArray[np.float64]]],
        translate: tuple[float, float] = (0.0, 0.0),
    ) -> bool:
        """
        Returns:
            True if the image was repainted.
        """
        if width <= 0 or height <= 0 or mapping is None:
            self._image = None
            self._signature = None
            return False

        phase = self.grid_phase(translate)
        signature = (
            width,
            height,
            mapping,
            tuple((c, id(coords), len(coords)) for c, coords in layers),
            phase,
        )
        if signature == self._signature and self._image is not None:
            return False

        if self._image is None or self._image.width() != width or self._image.height() != height:
            self._image = QImage(width, height, QImage.Format_ARGB32_Premultiplied)

        self._paint(self._image, mapping, layers, phase)
        self._signature = signature
        self.repaint_count += 1
        logger.debug(f"Background repainted ({width}x{height}, {sum(len(c) for _, c in layers)} lines).")
        return True

    # ---- grid ----

    def grid_phase(self, translate: tuple[float, float]) -> tuple[float, float]:
        tx, ty = translate
        return tx % self.grid_size, ty % self.grid_size

    @staticmethod
    def grid_positions(extent: int, offset: float, spacing: int) -> list[float]:
        """Line positions offset, offset + spacing, ... below extent."""
        positions = []
        pos = offset
        while pos < extent:
            positions.append(pos)
            pos += spacing
        return positions

    # ---- painting ----

    def _paint(
        self,
        image: QImage,
        mapping: ScaleMapping,
        layers: Sequence[tuple[Category, npt.NDArray[np.float64]]],
        phase: tuple[float, float],
    ) -> None:
        width, height = image.width(), image.height()
        image.fill(QColor(BACKGROUND_COLOR))

        painter = QPainter(image)
        try:
            # 1. Grid
            painter.setPen(QPen(rgba(GRID_COLOR), GRID_LINE_WIDTH))
            grid = [QLineF(x, 0, x, height) for x in self.grid_positions(width, phase[0], self.grid_size)]
            grid += [QLineF(0, y, width, y) for y in self.grid_positions(height, phase[1], self.grid_size)]
            painter.drawLines(grid)

            # 2. Background segments, one batch per category
            painter.setRenderHint(QPainter.Antialiasing, True)
            for category, coords in layers:
                if len(coords) == 0:
                    continue
                pen = QPen(QColor(CATEGORY_COLORS[category.value]), BACKGROUND_LINE_WIDTH)
                pen.setCapStyle(Qt.FlatCap)
                painter.setPen(pen)
                mapped = mapping.map_segments(coords)
                painter.drawLines([QLineF(x1, y1, x2, y2) for x1, y1, x2, y2 in mapped.tolist()])
        finally:
            painter.end()

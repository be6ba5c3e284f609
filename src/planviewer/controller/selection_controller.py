"""
Selection Engine
Rectangle drag gesture -> set of selected route segments.
"""
from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

from PySide6.QtCore import QObject, Signal

from planviewer.model.selection import DataRect, segments_in_rect
from planviewer.model.viewport import SelectionRect, Viewport

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt
    from planviewer.model.scales import ScaleMapping

logger = logging.getLogger(__name__)


class SelectionController(QObject):
    rect_changed = Signal(object)        # SelectionRect
    selection_changed = Signal(object)   # tuple[int, ...]

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._rect = SelectionRect()
        self._selected: tuple[int, ...] = ()

    @property
    def rect(self) -> SelectionRect:
        return self._rect

    @property
    def selected(self) -> tuple[int, ...]:
        return self._selected

    @property
    def is_dragging(self) -> bool:
        return self._rect.visible

    # ---- gesture ----

    def begin(self, x: float, y: float) -> None:
        self._set_rect(SelectionRect.start(x, y))

    def update(self, x: float, y: float) -> None:
        if not self._rect.visible:
            return
        self._set_rect(self._rect.drag_to(x, y))

    def cancel(self) -> None:
        """Drop an in-progress rectangle without selecting anything."""
        if self._rect.visible:
            logger.debug("Selection gesture aborted.")
            self._set_rect(self._rect.hidden())

    def commit(
        self,
        viewport: Viewport,
        mapping: Optional[ScaleMapping],
        route_coords: npt.NDArray[np.float64],
    ) -> Optional[tuple[int, ...]]:
        """
        Finish the gesture and replace the selected set.

        The rectangle is taken back through the viewport transform and the
        scale mapping into data space and tested against every route segment.

        Returns:
            The new selection, or None if no gesture was in progress.
        """
        if not self._rect.visible:
            return None
        rect = self._rect
        self._set_rect(rect.hidden())

        if rect.is_empty or mapping is None:
            selected: tuple[int, ...] = ()
        else:
            data_rect = self.to_data_rect(rect, viewport, mapping)
            selected = tuple(int(i) for i in segments_in_rect(route_coords, data_rect))

        logger.info(f"Rectangle selection picked {len(selected)} route segments.")
        self._set_selected(selected)
        return selected

    @staticmethod
    def to_data_rect(rect: SelectionRect, viewport: Viewport, mapping: ScaleMapping) -> DataRect:
        (sx1, sy1), (sx2, sy2) = rect.corners()
        cx1, cy1 = viewport.to_canvas(sx1, sy1)
        cx2, cy2 = viewport.to_canvas(sx2, sy2)
        x1, y1 = mapping.to_data(cx1, cy1)
        x2, y2 = mapping.to_data(cx2, cy2)
        return DataRect.from_corners(x1, y1, x2, y2)

    # ---- selected set ----

    def clear(self) -> None:
        self._set_selected(())

    def reset(self) -> None:
        self.cancel()
        self.clear()

    def _set_rect(self, rect: SelectionRect) -> None:
        self._rect = rect
        self.rect_changed.emit(rect)

    def _set_selected(self, selected: tuple[int, ...]) -> None:
        if selected == self._selected:
            return
        self._selected = selected
        self.selection_changed.emit(selected)

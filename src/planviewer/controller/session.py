"""
Plan Session (Controller)
=========================
The single object the window talks to while a plan is open.

Why is this file needed?
------------------------
1. Wiring: It owns the document, the layer visibility, the scale mapping, the
   ViewportController and the SelectionController, and keeps them consistent
   (e.g. hiding a layer recomputes the mapping).
2. Command surface: The toolbar only ever calls the small closed set of
   methods below (zoom_in, zoom_out, reset_view, fit_to_screen,
   toggle_selection_mode, clear_selection, set_layer_visible).
3. Input routing: Pointer and wheel events from the canvas arrive here and are
   turned into either panning or a rectangle selection.

Classes:
    PlanSession: Central state store with signals for canvas/panel sync.
"""
from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

import numpy as np
from PySide6.QtCore import QObject, Signal

from planviewer.model.document import PlanDocument, LayerVisibility
from planviewer.model.geometry_primitives import Category
from planviewer.model.scales import ScaleMapping, build_scale_mapping, compute_domains
from planviewer.controller.selection_controller import SelectionController
from planviewer.controller.viewport_controller import ViewportController

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

_NO_SEGMENTS = np.empty((0, 4), dtype=np.float64)
_NO_SEGMENTS.setflags(write=False)


class PlanSession(QObject):
    document_changed = Signal(object)
    layers_changed = Signal(object)
    mapping_changed = Signal(object)

    def __init__(self, auto_exit_selection: bool = True, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.auto_exit_selection = auto_exit_selection

        self.viewport = ViewportController(self)
        self.selection = SelectionController(self)

        self._document: PlanDocument = PlanDocument.empty()
        self._layers = LayerVisibility()
        self._mapping: Optional[ScaleMapping] = None

        self._pan_anchor: Optional[tuple[float, float]] = None

    # ------------------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------------------

    @property
    def document(self) -> PlanDocument:
        return self._document

    @property
    def mapping(self) -> Optional[ScaleMapping]:
        return self._mapping

    @property
    def layer_visibility(self) -> dict[Category, bool]:
        return self._layers.as_dict()

    @property
    def zoom_percent(self) -> int:
        return self.viewport.zoom_percent

    @property
    def selection_mode(self) -> bool:
        return self.viewport.selection_mode

    @property
    def selected(self) -> tuple[int, ...]:
        return self.selection.selected

    @property
    def selected_count(self) -> int:
        return len(self.selection.selected)

    def selected_routes(self) -> list[tuple[str | None, str | None]]:
        """Distinct (route Id, RunName) pairs owning the selected segments, in selection order."""
        seen: dict[tuple[str | None, str | None], None] = {}
        for index in self.selection.selected:
            seen.setdefault(self._document.route_owner(index), None)
        return list(seen)

    def is_layer_visible(self, category: Category) -> bool:
        return self._layers.is_visible(category)

    def visible_background(self) -> list[tuple[Category, npt.NDArray[np.float64]]]:
        """(category, coords) pairs of the background layers to rasterize, in drawing order."""
        return [(c, self._document.coords(c)) for c in self._layers.visible_background()]

    def visible_route_coords(self) -> npt.NDArray[np.float64]:
        if not self._layers.is_visible(Category.ROUTE):
            return _NO_SEGMENTS
        return self._document.coords(Category.ROUTE)

    # ------------------------------------------------------------------------------
    # Document & layers
    # ------------------------------------------------------------------------------

    def load_document(self, document: PlanDocument) -> None:
        """Replace the plan; viewport, selection and layers start over."""
        logger.info(f"Opening plan '{document.name}' ({len(document)} segments).")
        self._document = document
        self._layers.reset()
        self._pan_anchor = None
        self.selection.reset()
        self.viewport.reset()
        self._recompute_mapping(force=True)
        self.document_changed.emit(document)
        self.layers_changed.emit(self.layer_visibility)

    def set_layer_visible(self, category: Category, visible: bool) -> None:
        if not self._layers.set_visible(category, visible):
            return
        if category is Category.ROUTE and not visible:
            # hidden routes cannot stay highlighted
            self.selection.reset()
        self._recompute_mapping()
        self.layers_changed.emit(self.layer_visibility)

    def set_canvas_size(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            self.selection.cancel()
            self._pan_anchor = None
        self.viewport.set_canvas_size(width, height)
        self._recompute_mapping()

    def _recompute_mapping(self, force: bool = False) -> None:
        if not self.viewport.canvas_ready:
            mapping = None
        else:
            arrays = [self._document.coords(c) for c in self._layers.visible_categories()]
            x_domain, y_domain = compute_domains(arrays)
            width, height = self.viewport.canvas_size
            mapping = build_scale_mapping(x_domain, y_domain, width, height)

        if mapping == self._mapping and not force:
            return
        self._mapping = mapping
        self.viewport.set_mapping(mapping)
        if mapping is not None:
            logger.debug(f"Scale mapping: x={mapping.x_domain}, y={mapping.y_domain}, "
                         f"canvas={mapping.width}x{mapping.height}")
        self.mapping_changed.emit(mapping)

    # ------------------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------------------

    def zoom_in(self) -> None:
        self.viewport.zoom_in()

    def zoom_out(self) -> None:
        self.viewport.zoom_out()

    def reset_view(self) -> None:
        self.viewport.reset_view()

    def fit_to_screen(self) -> bool:
        return self.viewport.fit_to_screen()

    def toggle_selection_mode(self) -> bool:
        self.selection.cancel()
        self._pan_anchor = None
        return self.viewport.toggle_selection_mode()

    def clear_selection(self) -> None:
        self.selection.clear()

    # ------------------------------------------------------------------------------
    # Pointer input (screen coordinates)
    # ------------------------------------------------------------------------------

    def pointer_pressed(self, x: float, y: float) -> None:
        if not self.viewport.canvas_ready:
            return
        if self.selection_mode:
            self.selection.begin(x, y)
        else:
            self._pan_anchor = (x, y)

    def pointer_moved(self, x: float, y: float) -> None:
        if self.selection.is_dragging:
            self.selection.update(x, y)
        elif self._pan_anchor is not None:
            ax, ay = self._pan_anchor
            self._pan_anchor = (x, y)
            self.viewport.pan_by(x - ax, y - ay)

    def pointer_released(self, x: float, y: float) -> None:
        if self._pan_anchor is not None:
            self._pan_anchor = None
            self.viewport.commit_now()

        if not self.selection.is_dragging:
            return
        if not self.selection_mode:
            self.selection.cancel()
            return

        self.selection.update(x, y)
        self.selection.commit(self.viewport.viewport, self._mapping, self.visible_route_coords())
        if self.auto_exit_selection:
            self.viewport.set_selection_mode(False)

    def wheel(self, delta_y: float, x: float, y: float, now: Optional[float] = None) -> bool:
        return self.viewport.wheel(delta_y, x, y, now=now)

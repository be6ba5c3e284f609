"""
Plan Document (Data Model)
==========================
This module defines the immutable drawing that is being viewed and the
user-controlled layer visibility.

Why is this file needed?
------------------------
1. State Management: A loaded file becomes one PlanDocument. It is never
   mutated; opening another file replaces it as a whole.
2. Performance: Coordinates are exposed as cached (N, 4) numpy arrays so the
   domain computation, the background raster and the selection test never
   walk Python objects per frame.

Classes:
    PlanStatistics: Counts shown in the plan info dialog.
    PlanDocument: The drawing, grouped by Category.
    LayerVisibility: Category -> visible flag.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
import logging
from typing import Iterator, Mapping, TYPE_CHECKING

import numpy as np

from planviewer.model.geometry_primitives import Category, Segment, BACKGROUND_CATEGORIES

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanStatistics:
    routes: int = 0
    panels: int = 0
    fixtures: int = 0
    fittings: int = 0
    dropped_lines: int = 0
    truncated_lines: int = 0


@dataclass(frozen=True, eq=False)
class PlanDocument:
    """
    A collection of Segments plus a name.

    Routes and panels are also counted as whole objects (not segments) because
    that is what the plan info shows.
    """
    name: str
    by_category: Mapping[Category, tuple[Segment, ...]] = field(default_factory=dict)
    statistics: PlanStatistics = field(default_factory=PlanStatistics)

    @classmethod
    def empty(cls, name: str = "") -> PlanDocument:
        return cls(name=name)

    def segments(self, category: Category) -> tuple[Segment, ...]:
        return self.by_category.get(category, ())

    def __iter__(self) -> Iterator[Segment]:
        for category in Category:
            yield from self.segments(category)

    def __len__(self) -> int:
        return sum(len(v) for v in self.by_category.values())

    def count(self, category: Category) -> int:
        return len(self.segments(category))

    @cached_property
    def _coords(self) -> dict[Category, npt.NDArray[np.float64]]:
        out: dict[Category, npt.NDArray[np.float64]] = {}
        for category in Category:
            segs = self.segments(category)
            arr = np.empty((len(segs), 4), dtype=np.float64)
            for i, s in enumerate(segs):
                arr[i] = s.to_array()
            arr.setflags(write=False)
            out[category] = arr
        return out

    def coords(self, category: Category) -> npt.NDArray[np.float64]:
        """(N, 4) read-only array of [x1, y1, x2, y2] rows for one category."""
        return self._coords[category]

    def route_owner(self, index: int) -> tuple[str | None, str | None]:
        """(route Id, RunName) of a route segment."""
        seg = self.segments(Category.ROUTE)[index]
        return seg.owner_id, seg.label

    def route_ids(self) -> list[str]:
        """Distinct owning route ids of the loaded route segments, in file order."""
        seen: dict[str, None] = {}
        for seg in self.segments(Category.ROUTE):
            if seg.owner_id is not None:
                seen.setdefault(seg.owner_id, None)
        return list(seen)


class LayerVisibility:
    """
    Category -> visible flag. Every category starts visible.
    """
    def __init__(self, initial: Mapping[Category, bool] | None = None) -> None:
        self._visible: dict[Category, bool] = {c: True for c in Category}
        if initial:
            self._visible.update(initial)

    def is_visible(self, category: Category) -> bool:
        return self._visible[category]

    def set_visible(self, category: Category, visible: bool) -> bool:
        """Returns True if the flag actually changed."""
        if self._visible[category] == visible:
            return False
        self._visible[category] = visible
        logger.debug(f"Layer '{category.value}' visible={visible}")
        return True

    def visible_categories(self) -> list[Category]:
        return [c for c in Category if self._visible[c]]

    def visible_background(self) -> list[Category]:
        return [c for c in BACKGROUND_CATEGORIES if self._visible[c]]

    def as_dict(self) -> dict[Category, bool]:
        return dict(self._visible)

    def reset(self) -> None:
        for c in Category:
            self._visible[c] = True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LayerVisibility):
            return NotImplemented
        return self._visible == other._visible

    def __repr__(self) -> str:
        flags = ", ".join(f"{c.value}={v}" for c, v in self._visible.items())
        return f"LayerVisibility({flags})"

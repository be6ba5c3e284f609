"""
Geometric Primitives of an electrical plan.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


class Category(str, Enum):
    """Classification of a drawn line; drives colour and visibility grouping."""
    PANEL = "panel"
    OTHER = "other"
    EQUIPMENT = "equipment"
    FITTING = "fitting"
    FIXTURE = "fixture"
    ROUTE = "route"

    @property
    def display_name(self) -> str:
        return CATEGORY_DISPLAY_NAMES[self]

    @property
    def is_interactive(self) -> bool:
        """Only cable routes take part in rectangle selection."""
        return self is Category.ROUTE


CATEGORY_DISPLAY_NAMES: dict[Category, str] = {
    Category.PANEL: "Panels",
    Category.OTHER: "Other Elements",
    Category.EQUIPMENT: "Electrical Equipment",
    Category.FITTING: "Conduit Fittings",
    Category.FIXTURE: "Electrical Fixtures",
    Category.ROUTE: "Routes",
}

# Drawing order of the rasterized background
BACKGROUND_CATEGORIES: tuple[Category, ...] = tuple(c for c in Category if not c.is_interactive)


@dataclass(frozen=True)
class Point:
    """A point in data space. The Z axis of the source file is not modeled."""
    x: float
    y: float


@dataclass(frozen=True)
class Segment:
    """A straight drawn line between two points."""
    start: Point
    end: Point
    category: Category
    index: int  # position inside the category list of its document
    owner_id: Optional[str] = None  # route Id for route segments
    label: Optional[str] = None  # route RunName for route segments

    @property
    def color_key(self) -> str:
        return self.category.value

    def to_array(self) -> npt.NDArray[np.float64]:
        """Returns [x1, y1, x2, y2]."""
        return np.array([self.start.x, self.start.y, self.end.x, self.end.y])

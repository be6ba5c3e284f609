from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class DataRect:
    """Axis aligned rectangle in data space, always normalized."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_corners(cls, x1: float, y1: float, x2: float, y2: float) -> DataRect:
        return cls(min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2))

    def contains(self, x: float, y: float) -> bool:
        """Closed containment, the border counts as inside."""
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def edges(self) -> tuple[tuple[float, float, float, float], ...]:
        """The four edges as (x1, y1, x2, y2): bottom, right, top, left."""
        return (
            (self.min_x, self.min_y, self.max_x, self.min_y),
            (self.max_x, self.min_y, self.max_x, self.max_y),
            (self.max_x, self.max_y, self.min_x, self.max_y),
            (self.min_x, self.max_y, self.min_x, self.min_y),
        )


def segments_intersect(
    x1: float, y1: float, x2: float, y2: float,
    x3: float, y3: float, x4: float, y4: float,
) -> bool:
    """
    Parametric intersection test of segment P1P2 against segment P3P4.

    Solves P1 + u * (P2 - P1) = P3 + v * (P4 - P3). The segments intersect iff
    both u and v lie in [0, 1]. A zero denominator (parallel or coincident
    segments) is reported as no intersection.
    """
    denom = (y4 - y3) * (x2 - x1) - (x4 - x3) * (y2 - y1)
    if denom == 0:
        return False
    u = ((x4 - x3) * (y1 - y3) - (y4 - y3) * (x1 - x3)) / denom
    v = ((x2 - x1) * (y1 - y3) - (y2 - y1) * (x1 - x3)) / denom
    return 0.0 <= u <= 1.0 and 0.0 <= v <= 1.0


def segment_intersects_rect(
    x1: float, y1: float, x2: float, y2: float,
    rect: DataRect,
) -> bool:
    """
    True if either endpoint lies in the closed rectangle or the segment crosses
    one of its four edges.
    """
    if rect.contains(x1, y1) or rect.contains(x2, y2):
        return True
    return any(segments_intersect(x1, y1, x2, y2, *edge) for edge in rect.edges())


def segments_in_rect(coords: npt.NDArray[np.float64], rect: DataRect) -> npt.NDArray[np.int_]:
    """
    Vectorized `segment_intersects_rect` over many segments.

    Args:
        coords: (N, 4) array of [x1, y1, x2, y2] rows.
        rect: Selection rectangle in data space.

    Returns:
        Sorted row indices of the segments touching the rectangle.
    """
    if coords.size == 0:
        return np.empty(0, dtype=np.int_)

    x1, y1, x2, y2 = coords[:, 0], coords[:, 1], coords[:, 2], coords[:, 3]

    def inside(px: npt.NDArray[np.float64], py: npt.NDArray[np.float64]) -> npt.NDArray[np.bool_]:
        return (px >= rect.min_x) & (px <= rect.max_x) & (py >= rect.min_y) & (py <= rect.max_y)

    hit = inside(x1, y1) | inside(x2, y2)

    dx = x2 - x1
    dy = y2 - y1
    with np.errstate(divide="ignore", invalid="ignore"):
        for x3, y3, x4, y4 in rect.edges():
            ex = x4 - x3
            ey = y4 - y3
            denom = ey * dx - ex * dy
            u = (ex * (y1 - y3) - ey * (x1 - x3)) / denom
            v = (dx * (y1 - y3) - dy * (x1 - x3)) / denom
            crosses = (denom != 0) & (u >= 0) & (u <= 1) & (v >= 0) & (v <= 1)
            hit |= crosses

    return np.flatnonzero(hit)

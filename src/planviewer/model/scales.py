"""
Domain & Scale Calculator
=========================
Builds the linear data -> canvas mapping used by every renderer.

Why is this file needed?
------------------------
1. Decoupling: The mapping only depends on the visible segments and the canvas
   size. Pan and zoom are applied on top of it by the Viewport, so a wheel
   tick never forces a re-layout of tens of thousands of lines.
2. Determinism: Everything here is pure. Identical inputs give bit-for-bit
   identical mappings, which is what the background cache keys on.

Classes:
    LinearScale: Invertible linear map with "nice" domain rounding.
    ScaleMapping: The (sx, sy) pair for one canvas.
"""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable, Union, TYPE_CHECKING

import numpy as np

from planviewer.config import MARGIN, DEFAULT_DOMAIN, NICE_TICK_COUNT

if TYPE_CHECKING:
    import numpy.typing as npt

ArrayOrFloat = Union[float, "npt.NDArray[np.float64]"]

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def tick_increment(start: float, stop: float, count: int) -> float:
    """
    Step between "nice" ticks covering [start, stop] with roughly `count` ticks.

    Positive results are the step itself (1, 2 or 5 times a power of ten).
    For steps below 1 the result is negative and holds the reciprocal step,
    which keeps e.g. 0.1 exact as 1 / 10.
    """
    if count <= 0:
        return 0.0
    step = (stop - start) / count
    if not math.isfinite(step) or step <= 0:
        return 0.0
    power = math.floor(math.log10(step))
    error = step / 10 ** power
    if error >= _E10:
        factor = 10
    elif error >= _E5:
        factor = 5
    elif error >= _E2:
        factor = 2
    else:
        factor = 1
    if power >= 0:
        return factor * 10 ** power
    return -(10 ** -power) / factor


def nice_domain(start: float, stop: float, count: int = NICE_TICK_COUNT) -> tuple[float, float]:
    """Extend [start, stop] outwards to tick boundaries. Order of the input is kept."""
    reverse = stop < start
    lo, hi = (stop, start) if reverse else (start, stop)

    prestep = None
    for _ in range(10):
        step = tick_increment(lo, hi, count)
        if step == prestep:
            break
        if step > 0:
            lo = math.floor(lo / step) * step
            hi = math.ceil(hi / step) * step
        elif step < 0:
            lo = math.ceil(lo * step) / step
            hi = math.floor(hi * step) / step
        else:
            break
        prestep = step

    return (hi, lo) if reverse else (lo, hi)


@dataclass(frozen=True)
class LinearScale:
    """
    y = r0 + (x - d0) / (d1 - d0) * (r1 - r0)

    A degenerate domain maps everything to the middle of the range and a
    degenerate range inverts to the middle of the domain.
    """
    domain: tuple[float, float]
    range: tuple[float, float]

    def __call__(self, x: ArrayOrFloat) -> ArrayOrFloat:
        return self._interpolate(x, self.domain, self.range)

    def invert(self, y: ArrayOrFloat) -> ArrayOrFloat:
        return self._interpolate(y, self.range, self.domain)

    def nice(self, count: int = NICE_TICK_COUNT) -> LinearScale:
        return LinearScale(nice_domain(*self.domain, count=count), self.range)

    @staticmethod
    def _interpolate(
        x: ArrayOrFloat,
        src: tuple[float, float],
        dst: tuple[float, float],
    ) -> ArrayOrFloat:
        s0, s1 = src
        t0, t1 = dst
        if s1 == s0:
            mid = (t0 + t1) / 2
            if isinstance(x, np.ndarray):
                return np.full_like(x, mid, dtype=np.float64)
            return mid
        return t0 + (x - s0) / (s1 - s0) * (t1 - t0)


@dataclass(frozen=True)
class ScaleMapping:
    """Data space -> canvas space, before the Viewport transform."""
    sx: LinearScale
    sy: LinearScale
    x_domain: tuple[float, float]
    y_domain: tuple[float, float]
    width: int
    height: int
    margin: float = MARGIN

    def to_canvas(self, x: ArrayOrFloat, y: ArrayOrFloat) -> tuple[ArrayOrFloat, ArrayOrFloat]:
        return self.sx(x), self.sy(y)

    def to_data(self, cx: ArrayOrFloat, cy: ArrayOrFloat) -> tuple[ArrayOrFloat, ArrayOrFloat]:
        return self.sx.invert(cx), self.sy.invert(cy)

    def map_segments(self, coords: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """(N, 4) data rows -> (N, 4) canvas rows."""
        out = np.empty_like(coords, dtype=np.float64)
        out[:, 0] = self.sx(coords[:, 0])
        out[:, 1] = self.sy(coords[:, 1])
        out[:, 2] = self.sx(coords[:, 2])
        out[:, 3] = self.sy(coords[:, 3])
        return out

    @property
    def data_extent(self) -> tuple[float, float]:
        return self.x_domain[1] - self.x_domain[0], self.y_domain[1] - self.y_domain[0]

    @property
    def mapped_extent(self) -> tuple[float, float]:
        """Width and height of the (un-niced) data bounding box in canvas units."""
        x0, x1 = self.x_domain
        y0, y1 = self.y_domain
        return abs(self.sx(x1) - self.sx(x0)), abs(self.sy(y1) - self.sy(y0))

    @property
    def mapped_center(self) -> tuple[float, float]:
        x0, x1 = self.x_domain
        y0, y1 = self.y_domain
        return self.sx((x0 + x1) / 2), self.sy((y0 + y1) / 2)


def compute_domains(
    coord_arrays: Iterable[npt.NDArray[np.float64]],
) -> tuple[tuple[float, float], tuple[float, float]]:
    """
    Bounding box over all segment endpoints.

    Args:
        coord_arrays: (N, 4) arrays of [x1, y1, x2, y2] rows.

    Returns:
        (x_domain, y_domain); both default to (0, 100) when there are no segments.
    """
    blocks = [a for a in coord_arrays if a.size]
    if not blocks:
        return DEFAULT_DOMAIN, DEFAULT_DOMAIN

    stacked = np.vstack(blocks)
    xs = stacked[:, [0, 2]]
    ys = stacked[:, [1, 3]]
    return (
        (float(xs.min()), float(xs.max())),
        (float(ys.min()), float(ys.max())),
    )


def _widen(domain: tuple[float, float]) -> tuple[float, float]:
    d0, d1 = domain
    if d0 == d1:
        return d0 - 0.5, d1 + 0.5
    return domain


def build_scale_mapping(
    x_domain: tuple[float, float],
    y_domain: tuple[float, float],
    width: int,
    height: int,
    margin: float = MARGIN,
) -> ScaleMapping:
    """
    sx: x_domain -> [margin, width - margin]
    sy: y_domain -> [height - margin, margin]  (data Y grows up, screen Y grows down)

    A zero-width domain is widened by half a unit each way so both scales
    stay invertible; the stored x_domain / y_domain keep the raw extent.
    """
    sx = LinearScale(_widen(x_domain), (margin, width - margin)).nice()
    sy = LinearScale(_widen(y_domain), (height - margin, margin)).nice()
    return ScaleMapping(
        sx=sx,
        sy=sy,
        x_domain=x_domain,
        y_domain=y_domain,
        width=width,
        height=height,
        margin=margin,
    )

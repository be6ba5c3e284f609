"""
Viewport and selection rectangle value types.

screen = canvas * scale + translate, where canvas coordinates come from the
ScaleMapping.
"""
from __future__ import annotations

from dataclasses import dataclass, replace

from planviewer.config import MIN_SCALE, MAX_SCALE


def clamp_scale(scale: float) -> float:
    return min(max(MIN_SCALE, scale), MAX_SCALE)


@dataclass(frozen=True)
class Viewport:
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0

    def to_screen(self, x: float, y: float) -> tuple[float, float]:
        return x * self.scale + self.translate_x, y * self.scale + self.translate_y

    def to_canvas(self, sx: float, sy: float) -> tuple[float, float]:
        """Undo the affine transform: (screen - translate) / scale."""
        return (sx - self.translate_x) / self.scale, (sy - self.translate_y) / self.scale

    @property
    def zoom_percent(self) -> int:
        return round(self.scale * 100)


@dataclass(frozen=True)
class SelectionRect:
    """
    Screen-space rectangle of a drag gesture.

    Width and height are never negative; the anchor keeps the corner where the
    drag started.
    """
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    visible: bool = False
    anchor_x: float = 0.0
    anchor_y: float = 0.0

    @classmethod
    def start(cls, x: float, y: float) -> SelectionRect:
        return cls(x=x, y=y, visible=True, anchor_x=x, anchor_y=y)

    def drag_to(self, x: float, y: float) -> SelectionRect:
        return replace(
            self,
            x=min(x, self.anchor_x),
            y=min(y, self.anchor_y),
            width=abs(x - self.anchor_x),
            height=abs(y - self.anchor_y),
        )

    def hidden(self) -> SelectionRect:
        return replace(self, visible=False)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 and self.height == 0

    def corners(self) -> tuple[tuple[float, float], tuple[float, float]]:
        return (self.x, self.y), (self.x + self.width, self.y + self.height)

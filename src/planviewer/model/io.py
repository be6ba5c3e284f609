"""
Input Manager (JSON)
Turns an exported electrical plan (.json) into a PlanDocument.
"""
from __future__ import annotations

import json
import math
import logging
import os
from typing import Any, Optional

from planviewer.config import MAX_ELEMENTS_PER_CATEGORY, MAX_ROUTE_SEGMENTS, MAX_FILE_SIZE_BYTES
from planviewer.model.document import PlanDocument, PlanStatistics
from planviewer.model.geometry_primitives import Category, Point, Segment

logger = logging.getLogger(__name__)

# ViewLines key -> Category, in drawing order
VIEW_LINE_KEYS: dict[str, Category] = {
    "Other": Category.OTHER,
    "ElectricalEquipment": Category.EQUIPMENT,
    "ConduitFittings": Category.FITTING,
    "ElectricalFixture": Category.FIXTURE,
}


class PlanLoadError(Exception):
    """Raised when a file cannot be turned into a plan at all."""


class _CategoryBuilder:
    """Collects the segments of one category, enforcing the element cap."""

    def __init__(self, category: Category, cap: int) -> None:
        self.category = category
        self.cap = cap
        self.segments: list[Segment] = []
        self.dropped = 0
        self.truncated = 0

    @property
    def full(self) -> bool:
        return len(self.segments) >= self.cap

    def add(self, line: Any, owner_id: Optional[str] = None, label: Optional[str] = None) -> None:
        start, end = PlanLoader.read_line(line)
        if start is None or end is None:
            self.dropped += 1
            return
        if self.full:
            self.truncated += 1
            return
        self.segments.append(Segment(
            start=start,
            end=end,
            category=self.category,
            index=len(self.segments),
            owner_id=owner_id,
            label=label,
        ))


class PlanLoader:

    @staticmethod
    def load_file(filepath: str) -> PlanDocument:
        """
        Validate, read and parse a plan file.

        Raises:
            PlanLoadError: wrong extension, file too large, unreadable or not a JSON object.
        """
        logger.info(f"Loading plan from: {filepath}")

        if os.path.splitext(filepath)[1].lower() != ".json":
            raise PlanLoadError(f"'{os.path.basename(filepath)}' is not a JSON file.")

        try:
            size = os.path.getsize(filepath)
        except OSError as e:
            raise PlanLoadError(f"Cannot access '{filepath}': {e}") from e

        if size > MAX_FILE_SIZE_BYTES:
            raise PlanLoadError(
                f"File is too large ({size} bytes, limit is {MAX_FILE_SIZE_BYTES} bytes)."
            )

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise PlanLoadError(f"Failed to read file: {e}") from e
        except ValueError as e:
            # JSONDecodeError and oversized integer literals
            raise PlanLoadError(f"Failed to parse JSON: {e}") from e

        return PlanLoader.from_dict(data)

    @staticmethod
    def from_dict(data: Any) -> PlanDocument:
        """Build a document from already parsed JSON."""
        if not isinstance(data, dict):
            raise PlanLoadError("Plan file must contain a JSON object at the top level.")

        builders = {
            Category.PANEL: _CategoryBuilder(Category.PANEL, MAX_ELEMENTS_PER_CATEGORY),
            Category.OTHER: _CategoryBuilder(Category.OTHER, MAX_ELEMENTS_PER_CATEGORY),
            Category.EQUIPMENT: _CategoryBuilder(Category.EQUIPMENT, MAX_ELEMENTS_PER_CATEGORY),
            Category.FITTING: _CategoryBuilder(Category.FITTING, MAX_ELEMENTS_PER_CATEGORY),
            Category.FIXTURE: _CategoryBuilder(Category.FIXTURE, MAX_ELEMENTS_PER_CATEGORY),
            Category.ROUTE: _CategoryBuilder(Category.ROUTE, MAX_ROUTE_SEGMENTS),
        }

        # --- 1. PANELS ---
        panels = PlanLoader._as_dict(data.get("PanelsDataDict"))
        for panel in panels.values():
            if not isinstance(panel, dict):
                continue
            for line in PlanLoader._as_list(panel.get("Lines2D")):
                builders[Category.PANEL].add(line)

        # --- 2. VIEW LINES ---
        view_lines = PlanLoader._as_dict(data.get("ViewLines"))
        for key, category in VIEW_LINE_KEYS.items():
            for line in PlanLoader._as_list(view_lines.get(key)):
                builders[category].add(line)

        # --- 3. ROUTES ---
        routes = PlanLoader._as_dict(data.get("SingleRoutesInfoDict"))
        for route_key, route in routes.items():
            if not isinstance(route, dict):
                continue
            owner_id = str(route.get("Id") or route_key)
            label = route.get("RunName") or ""
            route_2d = PlanLoader._as_dict(route.get("Route2D"))
            for segment in PlanLoader._as_list(route_2d.get("Segments")):
                segment_2d = segment.get("Segment2D") if isinstance(segment, dict) else None
                builders[Category.ROUTE].add(segment_2d, owner_id=owner_id, label=label)

        dropped = sum(b.dropped for b in builders.values())
        truncated = sum(b.truncated for b in builders.values())
        if dropped:
            logger.debug(f"Dropped {dropped} lines with missing endpoints.")
        if truncated:
            logger.warning(f"Element cap reached, {truncated} lines were not loaded.")

        statistics = PlanStatistics(
            routes=len(routes),
            panels=len(panels),
            fixtures=len(PlanLoader._as_list(view_lines.get("ElectricalFixture"))),
            fittings=len(PlanLoader._as_list(view_lines.get("ConduitFittings"))),
            dropped_lines=dropped,
            truncated_lines=truncated,
        )

        document = PlanDocument(
            name=str(data.get("ViewName") or ""),
            by_category={c: tuple(b.segments) for c, b in builders.items()},
            statistics=statistics,
        )
        logger.info(f"Plan '{document.name}' loaded with {len(document)} segments.")
        return document

    # ------------------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------------------

    @staticmethod
    def read_point(raw: Any) -> Optional[Point]:
        """{X, Y, Z} -> Point; Z is ignored. None if X or Y is missing or not numeric."""
        if not isinstance(raw, dict):
            return None
        x, y = raw.get("X"), raw.get("Y")
        if isinstance(x, bool) or isinstance(y, bool):
            return None
        if not isinstance(x, (int, float)) or not isinstance(y, (int, float)):
            return None
        try:
            fx, fy = float(x), float(y)
        except (OverflowError, ValueError):
            return None
        if not (math.isfinite(fx) and math.isfinite(fy)):
            return None
        return Point(fx, fy)

    @staticmethod
    def read_line(raw: Any) -> tuple[Optional[Point], Optional[Point]]:
        if not isinstance(raw, dict):
            return None, None
        return PlanLoader.read_point(raw.get("Start")), PlanLoader.read_point(raw.get("End"))

    @staticmethod
    def _as_dict(value: Any) -> dict:
        return value if isinstance(value, dict) else {}

    @staticmethod
    def _as_list(value: Any) -> list:
        return value if isinstance(value, list) else []

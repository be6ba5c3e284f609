"""
Configuration & Constants
=========================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Abstraction: Magic numbers for zoom limits, timings and colours live in one
   place instead of being scattered across the controllers and widgets.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets when the app is frozen into an .exe.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    MARGIN (float): Fixed margin (px) between the canvas edge and the drawing.
"""
import sys
import os
from pathlib import Path


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # config.py is in src/planviewer/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


ASSETS_PATH: str = get_resource_path("assets")

# --- Scale mapping ---
MARGIN: float = 20.0
DEFAULT_DOMAIN: tuple[float, float] = (0.0, 100.0)
NICE_TICK_COUNT: int = 10

# --- Viewport ---
MIN_SCALE: float = 0.1
MAX_SCALE: float = 10.0
ZOOM_IN_FACTOR: float = 1.2
ZOOM_OUT_FACTOR: float = 0.8
WHEEL_ZOOM_IN_FACTOR: float = 1.1
WHEEL_ZOOM_OUT_FACTOR: float = 0.9
FIT_PADDING: float = 0.9

# --- Timing (ms) ---
WHEEL_THROTTLE_MS: int = 20
WHEEL_COMMIT_DELAY_MS: int = 100
BUTTON_COMMIT_DELAY_MS: int = 50

# --- Ingestion caps ---
MAX_ELEMENTS_PER_CATEGORY: int = 10_000
MAX_ROUTE_SEGMENTS: int = 15_000
MAX_FILE_SIZE_BYTES: int = 10 * 1024 * 1024

# --- Rendering ---
BACKGROUND_COLOR: str = "#0f0f17"
GRID_COLOR: tuple[int, int, int, float] = (50, 50, 70, 0.2)
GRID_LINE_WIDTH: float = 0.5
GRID_SIZE: int = 50
BACKGROUND_LINE_WIDTH: float = 0.1

ROUTE_LINE_WIDTH: float = 0.75
SELECTED_ROUTE_COLOR: str = "#00ff00"
SELECTED_ROUTE_LINE_WIDTH: float = 1.5

SELECTION_FILL: tuple[int, int, int, float] = (0, 255, 255, 0.2)
SELECTION_STROKE: str = "#00ffff"

# Stroke colour used on the canvas, keyed by Category.color_key
CATEGORY_COLORS: dict[str, str] = {
    "panel": "white",
    "other": "gray",
    "equipment": "blue",
    "fitting": "green",
    "fixture": "yellow",
    "route": "#f97316",
}

# Swatch colour shown in the layers panel
LAYER_SWATCH_COLORS: dict[str, str] = {
    "panel": "#ffffff",
    "other": "#94a3b8",
    "equipment": "#3b82f6",
    "fitting": "#10b981",
    "fixture": "#f59e0b",
    "route": "#f97316",
}

# --- Recent files ---
MAX_RECENT_FILES: int = 5
SETTINGS_ORGANIZATION: str = "planviewer"
SETTINGS_APPLICATION: str = "Electrical Plan Viewer"

"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Abstraction: Tile size, zoom bounds and gesture thresholds are read by the
   model, the store and the widgets. Keeping them here avoids magic numbers
   scattered throughout the code.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets (the bundled map image) when the app is frozen into an .exe.

Exports:
    TILE_SIZE (int): Edge length of one grid cell in world (image) pixels.
    ZOOM_MIN, ZOOM_MAX (float): Hard bounds for the viewport scale.
    ZOOM_LEVELS (tuple[str, ...]): Named zoom commands offered in the toolbar.
    ASSETS_PATH (str): Absolute path to the assets directory.
    DEFAULT_MAP_PATH (str): Absolute path to the bundled map image.
"""
import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: resolve relative to this file
    # config.py is in src/tiletrace/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# --- Grid ---
TILE_SIZE: int = 16  # source image tile width/height in pixels

# --- Zoom ---
ZOOM_MIN: float = 0.1
ZOOM_MAX: float = 8.0
ZOOM_FIT: str = "fit"
ZOOM_LEVELS: tuple[str, ...] = (ZOOM_FIT, "1", "5")
WHEEL_ZOOM_STEP: float = 1.25  # scale factor per wheel notch

# --- Touch gestures ---
TOUCH_DRAW_DELAY_MS: int = 120  # time a second finger has to join before drawing starts
TOUCH_MOVE_THRESHOLD_PX: float = 8.0  # movement that commits a candidate to drawing early
PINCH_MIN_DISTANCE_PX: float = 1.0  # below this the pinch factor is not computed

# --- UI ---
COPY_FEEDBACK_MS: int = 1000

# --- Paths ---
ASSETS_PATH: str = get_resource_path("assets")
DEFAULT_MAP_PATH: str = os.path.join(ASSETS_PATH, "map.png")

if not os.path.exists(ASSETS_PATH):
    logger.warning("Assets path not found at %s", ASSETS_PATH)

# spinglobe/utils/settings.py
"""
Centralized settings and constants for the globe.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

# --- Data ---
TOPO_JSON_PATH = "assets/world.topo.json"
COLLECTION_KEY = "ne_110m_admin_0_countries"

# --- Globe defaults ---
GLOBE_SIZE = 400              # viewport edge length in pixels
GLOBE_ROTATION_SPEED = 0.3    # degrees per displayed frame
GLOBE_PADDING_RATIO = 0.01    # SVG viewBox padding, fraction of size
HORIZON_STEP_DEG = 5.0        # max gap between points walked along the limb

# --- Colors ---
WATER_COLOR = "#88aab6"
LAND_COLOR = "#868585"
BORDER_COLOR = "#5d5e5d"
BORDER_WIDTH = 0.5
STATUS_TEXT_COLOR = (40, 40, 40)
ERROR_TEXT_COLOR = (220, 30, 30)
BG_COLOR = (245, 245, 245)

# --- Window ---
FPS = 60
WINDOW_TITLE = "spinglobe"
WINDOW_MARGIN = 20            # pixels around the globe
STATUS_FONT_SIZE = 18

# --- Offline export ---
GLOBE_NUM_FRAMES = 60
GLOBE_FRAMES_DIR = "globe_frames"

# --- Status messages ---
LOADING_TEXT = "Loading globe data..."
INVALID_STRUCTURE_TEXT = "Invalid TopoJSON data structure"


@dataclass(frozen=True)
class GlobeConfig:
    """Options recognised by the renderer core."""
    size: float = GLOBE_SIZE
    rotation_speed: float = GLOBE_ROTATION_SPEED
    asset_path: str = TOPO_JSON_PATH
    collection_key: str = COLLECTION_KEY

    def __post_init__(self) -> None:
        if not (isinstance(self.size, (int, float)) and math.isfinite(self.size) and self.size > 0):
            raise ValueError(f"size must be a positive number of pixels, got {self.size!r}")
        if not (isinstance(self.rotation_speed, (int, float)) and math.isfinite(self.rotation_speed)):
            raise ValueError(f"rotation_speed must be a finite number, got {self.rotation_speed!r}")
        if not self.collection_key:
            raise ValueError("collection_key must not be empty")


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    """'#88aab6' -> (136, 170, 182)."""
    h = color.lstrip("#")
    if len(h) != 6:
        raise ValueError(f"expected #rrggbb, got {color!r}")
    return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))

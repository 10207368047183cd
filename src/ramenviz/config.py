"""
Configuration & Global Constants
================================
This module serves as the central registry for defaults and tuning constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (swirl amplitude, reset thresholds,
   colours) from being scattered throughout the code.
2. Consistency: The model, the render session and the Qt panels all read the
   same defaults and slider ranges from here.

Exports:
    DEFAULT_* : Initial values of the visual settings.
    *_RANGE   : Accepted (min, max) ranges of the visual settings.
    STEAM_*   : Constants of the steam motion law.
"""
from typing import Tuple

Vec3 = Tuple[float, float, float]

# --- Application identity ---
APP_ID = "ramenviz"
VISIBLE_APP_NAME = "3D Ramen Visualizer"

# --- Visual settings (defaults + ranges) ---
DEFAULT_INTENSITY: float = 0.5
DEFAULT_SPEED: float = 1.0
DEFAULT_DENSITY: int = 100
DEFAULT_AUTO_ROTATE: bool = True
DEFAULT_POINT_SIZE: float = 0.02

INTENSITY_RANGE: Tuple[float, float] = (0.0, 1.0)
SPEED_RANGE: Tuple[float, float] = (0.1, 2.0)
DENSITY_RANGE: Tuple[int, int] = (1, 5000)  # upper bound only limits the slider

# --- Steam emission ---
DEFAULT_ORIGIN: Vec3 = (0.0, 0.5, 0.0)

# Spread of the base positions around the origin
EMISSION_SPREAD_XZ: float = 1.0
EMISSION_SPREAD_Y: float = 0.5

# Velocity scale per axis
VELOCITY_SCALE_XZ: float = 0.005
VELOCITY_SCALE_Y: float = 0.01

# --- Steam motion law ---
SWIRL_FREQUENCY: float = 2.0
SWIRL_AMPLITUDE: float = 0.1
MAX_RISE: float = 3.0  # above the origin height
MAX_DISPLACEMENT: float = 2.0

# --- Render loop ---
FRAME_INTERVAL_MS: int = 16
TIME_STEP: float = 0.01  # simulation time per presented frame
AUTO_ROTATE_STEP_DEG: float = 0.0573  # ~0.001 rad per frame

# --- Colours ---
POINT_CLOUD_COLOR: Vec3 = (0.8, 0.2, 0.2)
STEAM_COLOR: Vec3 = (1.0, 1.0, 1.0)
STEAM_ALPHA: float = 0.3
STEAM_POINT_SIZE: float = 2.0
BACKGROUND_COLOR: str = "#101014"

# --- Camera ---
CAMERA_START_POSITION: Vec3 = (0.0, 1.5, 5.0)
CAMERA_VIEW_ANGLE: float = 75.0

# --- Supported input files ---
POINT_CLOUD_EXTENSIONS: Tuple[str, ...] = ("ply", "xyz", "json")
SCENE_EXTENSIONS: Tuple[str, ...] = ("glb", "gltf")
SUPPORTED_EXTENSIONS: Tuple[str, ...] = POINT_CLOUD_EXTENSIONS + SCENE_EXTENSIONS

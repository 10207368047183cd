"""
Ground Plane Picking
====================
Converts a 2D screen position into a 3D point on the horizontal reference
plane (y = 0), used to move the steam emitter where the user clicks.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple, TYPE_CHECKING
import logging
import math

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

_EPS = 1e-9


@dataclass(frozen=True)
class Viewport:
    """Size of the widget in pixels. Screen origin is top-left, y points down."""
    width: int
    height: int

    @property
    def aspect(self) -> float:
        return self.width / self.height if self.height > 0 else 1.0


@dataclass(frozen=True)
class CameraState:
    position: Tuple[float, float, float]
    focal_point: Tuple[float, float, float]
    view_up: Tuple[float, float, float] = (0.0, 1.0, 0.0)
    view_angle: float = 30.0  # vertical field of view in degrees
    parallel_projection: bool = False
    parallel_scale: float = 1.0  # half of the visible height in parallel mode

    @classmethod
    def from_pyvista(cls, camera: Any) -> CameraState:
        """Snapshot a live pyvista.Camera."""
        return cls(
            position=tuple(camera.position),
            focal_point=tuple(camera.focal_point),
            view_up=tuple(camera.up),
            view_angle=float(camera.view_angle),
            parallel_projection=bool(camera.parallel_projection),
            parallel_scale=float(camera.parallel_scale),
        )

    def basis(self) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Orthonormal (forward, right, up) vectors of the camera.

        When view_up is parallel to the view direction (a camera looking
        straight down with the default y-up), the world axis least aligned
        with the view direction is used as up instead.

        Raises:
            ValueError: The camera position and focal point coincide.
        """
        position = np.asarray(self.position, dtype=np.float64)
        forward = np.asarray(self.focal_point, dtype=np.float64) - position
        length = np.linalg.norm(forward)
        if not np.isfinite(length) or length < _EPS:
            raise ValueError("Camera position and focal point coincide.")
        forward /= length

        right = np.cross(forward, np.asarray(self.view_up, dtype=np.float64))
        if np.linalg.norm(right) < _EPS:
            fallback_up = np.eye(3)[int(np.argmin(np.abs(forward)))]
            right = np.cross(forward, fallback_up)
        right /= np.linalg.norm(right)

        up = np.cross(right, forward)
        return forward, right, up


def screen_to_ndc(screen_x: float, screen_y: float, viewport: Viewport) -> Tuple[float, float]:
    """Map pixel coordinates to normalized device coordinates in [-1, 1]."""
    return (
        2.0 * screen_x / viewport.width - 1.0,
        1.0 - 2.0 * screen_y / viewport.height,
    )


def camera_ray(
    ndc_x: float,
    ndc_y: float,
    camera: CameraState,
    aspect: float,
) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Return (origin, unit direction) of the ray through an NDC point."""
    forward, right, up = camera.basis()
    position = np.asarray(camera.position, dtype=np.float64)

    if camera.parallel_projection:
        half_h = camera.parallel_scale
        origin = position + right * (ndc_x * half_h * aspect) + up * (ndc_y * half_h)
        return origin, forward

    tan_half = math.tan(math.radians(camera.view_angle) / 2.0)
    direction = forward + right * (ndc_x * tan_half * aspect) + up * (ndc_y * tan_half)
    return position, direction / np.linalg.norm(direction)


def intersect_ground_plane(
    origin: npt.NDArray[np.float64],
    direction: npt.NDArray[np.float64],
    plane_height: float = 0.0,
) -> Optional[npt.NDArray[np.float64]]:
    """Intersect a ray with the plane y = plane_height. None on a miss."""
    if not (np.all(np.isfinite(origin)) and np.all(np.isfinite(direction))):
        return None
    if abs(direction[1]) < _EPS:
        return None

    s = (plane_height - origin[1]) / direction[1]
    if s < 0.0:
        # The plane is behind the ray
        return None

    hit = origin + s * direction
    return hit if np.all(np.isfinite(hit)) else None


def pick(
    screen_x: float,
    screen_y: float,
    viewport: Viewport,
    camera: CameraState,
) -> Optional[npt.NDArray[np.float64]]:
    """
    Find the point on the ground plane under a screen position.

    Args:
        screen_x: Horizontal pixel coordinate (0 = left edge).
        screen_y: Vertical pixel coordinate (0 = top edge).
        viewport: Size of the view in pixels.
        camera: Camera the view is rendered with.

    Returns:
        The (3,) intersection point, or None when the ray is parallel to the
        plane, points away from it, or the camera or viewport is degenerate.
    """
    if viewport.width <= 0 or viewport.height <= 0:
        return None

    ndc_x, ndc_y = screen_to_ndc(screen_x, screen_y, viewport)
    try:
        origin, direction = camera_ray(ndc_x, ndc_y, camera, viewport.aspect)
    except ValueError as e:
        logger.debug(f"No pick ray: {e}")
        return None
    return intersect_ground_plane(origin, direction)

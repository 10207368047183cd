"""
Render Session
==============
The single render-loop actor. Every piece of mutable state the visualizer
needs (settings, particle field, emission origin, scene resources, the
outstanding load) lives here and is only touched from the render-loop thread.

Why is this file needed?
------------------------
1. Atomic ticks: One call to `tick()` is one frame. Parsed assets and origin
   relocations delivered between frames are queued and applied at the start
   of the next tick, never in the middle of one.
2. Load cancellation: Each load gets a request id. Dropping a second file
   supersedes the first, and a late result for the first is discarded.
3. Shutdown: `shutdown()` tears down the scene synchronously; the session
   refuses to tick afterwards.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence, TYPE_CHECKING

import numpy as np

from ramenviz import config
from ramenviz.controller.scene_manager import SceneResourceManager
from ramenviz.model.assets import ParsedAsset
from ramenviz.model.errors import ParseError, SceneClosedError
from ramenviz.model.particles import FrameState, ParticleField
from ramenviz.model.picking import CameraState, Viewport, pick
from ramenviz.model.settings import VisualSettings

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class RenderSession:
    def __init__(
        self,
        scene: SceneResourceManager,
        settings: Optional[VisualSettings] = None,
        origin: Sequence[float] = config.DEFAULT_ORIGIN,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.scene = scene
        self.settings: VisualSettings = settings if settings is not None else VisualSettings()
        self.origin: npt.NDArray[np.float64] = np.asarray(origin, dtype=np.float64).reshape(3)
        self.rng = rng if rng is not None else np.random.default_rng()

        self.field: Optional[ParticleField] = None
        self._field_density: Optional[int] = None

        # --- Queued between ticks ---
        self._pending_asset: Optional[ParsedAsset] = None
        self._pending_origin: Optional[npt.NDArray[np.float64]] = None

        # --- Load bookkeeping ---
        self._next_request_id: int = 0
        self._active_request: Optional[int] = None
        self.last_error: Optional[str] = None

        self._closed = False

    # ------------------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------------------

    def update_settings(self, settings: VisualSettings) -> None:
        """Swap in a new settings snapshot. Takes effect on the next tick."""
        self.settings = settings

    # ------------------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------------------

    @property
    def active_request(self) -> Optional[int]:
        return self._active_request

    def begin_load(self, filename: str) -> int:
        """Register a new load. Any older outstanding load is superseded."""
        self._ensure_open()
        if self._active_request is not None:
            logger.info(f"Load request {self._active_request} superseded.")

        self._next_request_id += 1
        self._active_request = self._next_request_id
        logger.info(f"Load request {self._active_request} started for '{filename}'.")
        return self._active_request

    def cancel_load(self) -> None:
        if self._active_request is not None:
            logger.info(f"Load request {self._active_request} cancelled.")
        self._active_request = None

    def deliver_result(self, request_id: int, asset: ParsedAsset) -> bool:
        """
        Hand a parsed asset back to the session.

        Returns:
            True if the asset was queued for installation on the next tick,
            False if the request was superseded or cancelled.
        """
        if self._closed or request_id != self._active_request:
            logger.debug(f"Dropping stale result of load request {request_id}.")
            return False

        self._active_request = None
        self._pending_asset = asset
        self.last_error = None
        return True

    def deliver_failure(self, request_id: int, error: ParseError | str) -> bool:
        """Record a failed load. The installed asset is left untouched."""
        if self._closed or request_id != self._active_request:
            logger.debug(f"Dropping stale failure of load request {request_id}.")
            return False

        self._active_request = None
        self.last_error = str(error)
        logger.error(f"Load request {request_id} failed: {error}")
        return True

    # ------------------------------------------------------------------------------
    # Picking
    # ------------------------------------------------------------------------------

    def request_origin(self, origin: Sequence[float]) -> None:
        """Queue an emitter relocation for the next tick."""
        self._pending_origin = np.asarray(origin, dtype=np.float64).reshape(3)

    def pick_origin(self, screen_x: float, screen_y: float, viewport: Viewport, camera: CameraState) -> bool:
        """Move the emitter to the ground point under the cursor, if there is one."""
        hit = pick(screen_x, screen_y, viewport, camera)
        if hit is None:
            logger.debug(f"No ground intersection at ({screen_x}, {screen_y}).")
            return False
        self.request_origin(hit)
        return True

    # ------------------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------------------

    def tick(self, dt: float = config.TIME_STEP) -> FrameState:
        """Run one atomic frame and return what the renderer should draw."""
        self._ensure_open()

        # 1. Install the asset delivered since the last frame
        if self._pending_asset is not None:
            asset, self._pending_asset = self._pending_asset, None
            self._install(asset)

        # 2. Read the snapshot once for the whole frame
        settings = self.settings

        # 3. Density changed -> rebuild
        if self.field is None or settings.density != self._field_density:
            self._rebuild_field(settings)

        # 4. Relocate the emitter
        if self._pending_origin is not None:
            self.origin, self._pending_origin = self._pending_origin, None
            self.field.set_origin(self.origin)

        # 5. Advance
        self.field.tick(dt, settings.speed)
        if settings.auto_rotate:
            self.scene.rotate_asset(config.AUTO_ROTATE_STEP_DEG)
        self.scene.apply_point_size(settings.point_size)

        frame = FrameState(
            positions=self.field.positions.copy(),
            time=self.field.time,
            intensity=settings.intensity,
            speed=settings.speed,
        )
        self.scene.update_particles(frame)
        return frame

    def _install(self, asset: ParsedAsset) -> None:
        """Install a parsed asset. A rejected asset leaves the current one in place."""
        try:
            self.scene.install(asset)
        except SceneClosedError:
            raise
        except Exception as e:
            self.last_error = f"Could not display '{asset.source_name}': {e}"
            logger.error(self.last_error)

    def _rebuild_field(self, settings: VisualSettings) -> None:
        previous = self._field_density
        self.field = ParticleField.create(settings.density, self.origin, rng=self.rng)
        self._field_density = settings.density
        self.scene.install_particles(self.field, settings.intensity)
        if previous is not None:
            logger.info(f"Particle field rebuilt: {previous} -> {settings.density} particles.")

    # ------------------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    def shutdown(self) -> None:
        """Cancel pending work and release every resource. Safe to call twice."""
        if self._closed:
            return
        self.cancel_load()
        self._pending_asset = None
        self._pending_origin = None
        self.scene.teardown()
        self.field = None
        self._field_density = None
        self._closed = True
        logger.info("Render session shut down.")

    def _ensure_open(self) -> None:
        if self._closed:
            raise SceneClosedError("Render session has been shut down.")

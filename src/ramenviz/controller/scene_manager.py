"""
Scene Resource Manager
======================
Owns every actor the core puts into the render context.

Why is this file needed?
------------------------
1. Swap-without-flicker: A newly loaded asset is added to the plotter
   BEFORE the previous one is removed, so no frame is rendered empty.
2. In-place updates: The steam cloud is a single PolyData whose points are
   overwritten every tick instead of re-adding an actor per frame.
3. Teardown: On shutdown every actor is removed and every dataset reference
   is dropped explicitly.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import numpy as np
import pyvista as pv

from ramenviz import config
from ramenviz.model.assets import ParsedAsset, PointCloud, SceneModel
from ramenviz.model.errors import SceneClosedError
from ramenviz.model.particles import FrameState, ParticleField

logger = logging.getLogger(__name__)

# World units of the point size setting -> screen pixels
POINT_SIZE_PIXELS_PER_UNIT = 150.0


class RenderTarget(Protocol):
    """The part of pyvista.Plotter the manager relies on."""

    def add_mesh(self, mesh: Any, **kwargs: Any) -> Any: ...

    def remove_actor(self, actor: Any, reset_camera: bool = False, render: bool = True) -> bool: ...


def point_size_pixels(point_size: float) -> float:
    return max(1.0, point_size * POINT_SIZE_PIXELS_PER_UNIT)


class SceneResourceManager:
    def __init__(self, plotter: RenderTarget, point_size: float = config.DEFAULT_POINT_SIZE) -> None:
        self.plotter = plotter
        self._point_size = point_size

        # --- Asset layer ---
        self._asset: Optional[ParsedAsset] = None
        self._asset_mesh: Optional[pv.DataObject] = None
        self._asset_actor: Optional[Any] = None

        # --- Steam layer ---
        self._steam_mesh: Optional[pv.PolyData] = None
        self._steam_actor: Optional[Any] = None

        self._closed = False

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def attached_actor_count(self) -> int:
        """Number of asset actors currently attached (0 or 1 outside a swap)."""
        return 0 if self._asset_actor is None else 1

    def current_asset(self) -> Optional[ParsedAsset]:
        return self._asset

    def install(self, asset: ParsedAsset) -> None:
        """Attach `asset`, then detach and release whatever it replaces."""
        self._ensure_open()

        mesh = self._build_asset_mesh(asset)
        # PyVista refuses empty meshes: an empty cloud is installed without an actor
        empty = isinstance(asset, PointCloud) and asset.vertex_count == 0
        new_actor = None if empty else self._add_asset_actor(asset, mesh)

        old_actor = self._asset_actor
        old_name = self._asset.source_name if self._asset is not None else None

        self._asset = asset
        self._asset_mesh = mesh
        self._asset_actor = new_actor

        if old_actor is not None:
            self.plotter.remove_actor(old_actor, reset_camera=False, render=False)
            logger.debug(f"Released previous asset '{old_name}'.")

        logger.info(f"Installed asset '{asset.source_name}'.")

    def install_particles(self, field: ParticleField, intensity: float) -> None:
        """Replace the steam actor with one sized for `field`."""
        self._ensure_open()

        old_actor = self._steam_actor
        self._steam_mesh = None
        self._steam_actor = None

        if len(field) > 0:
            self._steam_mesh = pv.PolyData(np.array(field.positions, dtype=np.float32))
            self._steam_actor = self.plotter.add_mesh(
                self._steam_mesh,
                color=config.STEAM_COLOR,
                opacity=intensity * config.STEAM_ALPHA,
                point_size=config.STEAM_POINT_SIZE,
                render_points_as_spheres=True,
                style="points",
                pickable=False,
                reset_camera=False,
                render=False,
            )

        if old_actor is not None:
            self.plotter.remove_actor(old_actor, reset_camera=False, render=False)

        logger.debug(f"Steam layer rebuilt with {len(field)} particles.")

    def update_particles(self, frame: FrameState) -> None:
        """Push one tick's particle positions and uniforms to the steam actor."""
        self._ensure_open()
        if self._steam_mesh is None or self._steam_actor is None:
            return

        if len(frame.positions) != self._steam_mesh.n_points:
            raise ValueError(
                f"Frame has {len(frame.positions)} particles, steam layer holds {self._steam_mesh.n_points}."
            )

        self._steam_mesh.points = frame.positions
        self._steam_actor.prop.opacity = frame.intensity * config.STEAM_ALPHA

    def rotate_asset(self, degrees: float) -> None:
        """Spin the installed asset around the vertical axis."""
        if self._asset_actor is not None:
            self._asset_actor.RotateY(degrees)

    def apply_point_size(self, point_size: float) -> None:
        self._point_size = point_size
        if self._asset_actor is not None and isinstance(self._asset, PointCloud):
            self._asset_actor.prop.point_size = point_size_pixels(point_size)

    def teardown(self) -> None:
        """Remove every owned actor and drop every dataset. Safe to call twice."""
        if self._closed:
            return

        for actor in (self._asset_actor, self._steam_actor):
            if actor is not None:
                self.plotter.remove_actor(actor, reset_camera=False, render=False)

        self._asset = None
        self._asset_mesh = None
        self._asset_actor = None
        self._steam_mesh = None
        self._steam_actor = None
        self._closed = True
        logger.info("Scene resources released.")

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise SceneClosedError("Scene has been torn down.")

    @staticmethod
    def _build_asset_mesh(asset: ParsedAsset) -> pv.DataObject:
        if isinstance(asset, PointCloud):
            if asset.vertex_count == 0:
                return pv.PolyData()
            return pv.PolyData(np.array(asset.points, dtype=np.float32))
        if isinstance(asset, SceneModel):
            return asset.dataset
        raise TypeError(f"Cannot install asset of type {type(asset).__name__}.")

    def _add_asset_actor(self, asset: ParsedAsset, mesh: pv.DataObject) -> Any:
        if isinstance(asset, PointCloud):
            actor = self.plotter.add_mesh(
                mesh,
                color=config.POINT_CLOUD_COLOR,
                point_size=point_size_pixels(self._point_size),
                render_points_as_spheres=True,
                style="points",
                pickable=False,
                reset_camera=False,
                render=False,
            )
        else:
            actor = self.plotter.add_mesh(
                mesh,
                smooth_shading=True,
                pickable=False,
                reset_camera=False,
                render=False,
            )

        # MultiBlock datasets come back as (actor, mapper)
        if isinstance(actor, tuple):
            actor = actor[0]
        return actor

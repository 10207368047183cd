"""
3D Viewer Widget (PyVista Wrapper)
==================================
Hosts the QtInteractor, owns the RenderSession and drives it from a QTimer.

Interaction:
    - Left drag: orbit (VTK trackball camera)
    - Shift + left click: move the steam emitter to the clicked ground point
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QTimer, Signal
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QWidget, QVBoxLayout

from pyvistaqt import QtInteractor

from ramenviz import config
from ramenviz.controller.scene_manager import SceneResourceManager
from ramenviz.controller.session import RenderSession
from ramenviz.model.assets import ParsedAsset
from ramenviz.model.picking import CameraState, Viewport
from ramenviz.model.settings import VisualSettings

logger = logging.getLogger(__name__)


class SteamViewerWidget(QWidget):
    # Emitted once a delivered asset has actually been installed
    asset_installed = Signal(str)
    # Emitted when a delivered asset could not be put on screen
    asset_rejected = Signal(str)

    def __init__(self, settings: Optional[VisualSettings] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        self.layout_box: QVBoxLayout = QVBoxLayout(self)
        self.layout_box.setContentsMargins(0, 0, 0, 0)

        self.plotter: QtInteractor = QtInteractor(self)
        self.layout_box.addWidget(self.plotter)
        self._init_plotter()

        self.session = RenderSession(SceneResourceManager(self.plotter), settings=settings)
        self._shown_asset: Optional[ParsedAsset] = None
        self._attach_observers()

        # Frame loop
        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(config.FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self._on_frame)
        self._frame_timer.start()

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def update_settings(self, settings: VisualSettings) -> None:
        self.session.update_settings(settings)

    def shutdown(self) -> None:
        """Stop the frame loop and release every scene resource."""
        if self.session.closed:
            return
        self._frame_timer.stop()
        self.session.shutdown()
        self.plotter.close()

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _init_plotter(self) -> None:
        self.plotter.set_background(config.BACKGROUND_COLOR)
        self.plotter.camera.position = config.CAMERA_START_POSITION
        self.plotter.camera.focal_point = config.DEFAULT_ORIGIN
        self.plotter.camera.up = (0.0, 1.0, 0.0)
        self.plotter.camera.view_angle = config.CAMERA_VIEW_ANGLE

    def _attach_observers(self) -> None:
        iren = self.plotter.iren
        iren.add_observer("LeftButtonPressEvent", lambda *_: self._on_left_press())

    def _on_left_press(self) -> None:
        if not self.plotter.iren.interactor.GetShiftKey():
            return

        # VTK reports display coordinates with the origin at the bottom-left
        x, y = self.plotter.iren.get_event_position()
        width, height = self.plotter.window_size
        moved = self.session.pick_origin(
            x, height - y,
            Viewport(width, height),
            CameraState.from_pyvista(self.plotter.camera),
        )
        if moved:
            logger.info("Steam emitter relocated.")

    def _on_frame(self) -> None:
        if self.session.closed:
            return
        error_before = self.session.last_error
        try:
            self.session.tick(config.TIME_STEP)
        except Exception:
            logger.exception("Frame update failed, stopping the frame loop.")
            self._frame_timer.stop()
            return

        if self.session.last_error is not None and self.session.last_error is not error_before:
            self.asset_rejected.emit(self.session.last_error)

        current = self.session.scene.current_asset()
        if current is not None and current is not self._shown_asset:
            self._shown_asset = current
            self.plotter.reset_camera()
            self.asset_installed.emit(current.source_name)

        self.plotter.render()

    def closeEvent(self, event: QCloseEvent) -> None:
        self.shutdown()
        super().closeEvent(event)

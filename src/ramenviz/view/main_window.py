"""
Main Application Window
=======================
The primary GUI container that holds the Menu Bar, the settings panel and
the 3D viewer.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. File acquisition: It reads dropped or opened files from disk and hands the
   raw bytes to a background ParseWorker.
3. Routing: Worker results are delivered to the render session; failures are
   shown to the user while the current scene stays on screen.
"""
import logging
import os
from typing import Dict, Optional

from PySide6.QtWidgets import QMainWindow, QSplitter, QFileDialog, QMessageBox
from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QCloseEvent, QDragEnterEvent, QDropEvent

from ramenviz import config
from ramenviz.controller.loader import file_extension
from ramenviz.controller.workers import ParseWorker
from ramenviz.model.errors import UnsupportedFormat
from ramenviz.model.settings import VisualSettings
from ramenviz.view.controls import ControlPanel
from ramenviz.view.viewer import SteamViewerWidget

logger = logging.getLogger(__name__)

FILE_FILTER = (
    "3D assets (*.ply *.xyz *.json *.glb *.gltf);;"
    "Point clouds (*.ply *.xyz *.json);;"
    "glTF scenes (*.glb *.gltf)"
)


class MainWindow(QMainWindow):
    def __init__(self, settings: Optional[VisualSettings] = None) -> None:
        super().__init__()
        settings = settings or VisualSettings()

        self.setWindowTitle(config.VISIBLE_APP_NAME)
        self.resize(1400, 900)
        self.setAcceptDrops(True)

        # Workers still running, keyed by request id
        self._workers: Dict[int, ParseWorker] = {}

        # --- CONTENT AREA ---
        splitter = QSplitter(Qt.Horizontal)
        self.setCentralWidget(splitter)

        # LEFT: settings
        self.controls = ControlPanel(settings)
        splitter.addWidget(self.controls)

        # RIGHT: 3D view
        self.viewer = SteamViewerWidget(settings)
        splitter.addWidget(self.viewer)

        # 1 part sidebar : 4 parts 3D view
        splitter.setSizes([300, 1100])

        # --- SIGNAL CONNECTIONS ---
        self.controls.settings_changed.connect(self.viewer.update_settings)
        self.viewer.asset_installed.connect(self.on_asset_installed)
        self.viewer.asset_rejected.connect(self.on_asset_rejected)

        self._create_actions()
        self._create_menus()
        self.statusBar().showMessage("Open or drop a .ply, .xyz, .json, .glb or .gltf file.")

    def _create_actions(self) -> None:
        self.act_open = QAction("Open...", self)
        self.act_open.setShortcut("Ctrl+O")
        self.act_open.triggered.connect(self.on_file_open)

        self.act_exit = QAction("Exit", self)
        self.act_exit.setShortcut("Ctrl+Q")
        self.act_exit.triggered.connect(self.close)

    def _create_menus(self) -> None:
        menu_file = self.menuBar().addMenu("File")
        menu_file.addAction(self.act_open)
        menu_file.addSeparator()
        menu_file.addAction(self.act_exit)

    # ------------------------------------------------------------------------------
    # File acquisition
    # ------------------------------------------------------------------------------

    def on_file_open(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open 3D asset", "", FILE_FILTER)
        if path:
            self.load_file(path)

    def dragEnterEvent(self, event: QDragEnterEvent) -> None:
        urls = event.mimeData().urls()
        if urls and urls[0].isLocalFile():
            event.acceptProposedAction()
        else:
            event.ignore()

    def dropEvent(self, event: QDropEvent) -> None:
        urls = event.mimeData().urls()
        if not urls:
            return
        # Only the first file is used
        self.load_file(urls[0].toLocalFile())
        event.acceptProposedAction()

    def load_file(self, path: str) -> None:
        filename = os.path.basename(path)

        if file_extension(filename) not in config.SUPPORTED_EXTENSIONS:
            self.show_error(str(UnsupportedFormat(file_extension(filename))))
            return

        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            logger.error(f"Could not read '{path}': {e}")
            self.show_error(f"Could not read file:\n{e}")
            return

        # Superseding a running load: its worker result will be ignored
        for worker in self._workers.values():
            worker.cancel()

        request_id = self.viewer.session.begin_load(filename)
        worker = ParseWorker(request_id, data, filename)
        worker.parsed.connect(self.on_parsed)
        worker.failed.connect(self.on_parse_failed)
        worker.finished.connect(lambda rid=request_id: self._forget_worker(rid))
        self._workers[request_id] = worker
        worker.start()

        self.statusBar().showMessage(f"Loading {filename}...")

    # ------------------------------------------------------------------------------
    # Worker results (delivered on the GUI thread, between frames)
    # ------------------------------------------------------------------------------

    def on_parsed(self, request_id: int, asset: object) -> None:
        self.viewer.session.deliver_result(request_id, asset)

    def on_parse_failed(self, request_id: int, message: str) -> None:
        if self.viewer.session.deliver_failure(request_id, message):
            self.statusBar().showMessage("Loading failed.")
            self.show_error(message)

    def on_asset_installed(self, name: str) -> None:
        self.statusBar().showMessage(f"Showing {name}")

    def on_asset_rejected(self, message: str) -> None:
        self.statusBar().showMessage("Loading failed.")
        self.show_error(message)

    def show_error(self, message: str) -> None:
        QMessageBox.critical(self, "Loading Error", message)

    def _forget_worker(self, request_id: int) -> None:
        worker = self._workers.pop(request_id, None)
        if worker is not None:
            worker.deleteLater()

    # ------------------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------------------

    def closeEvent(self, event: QCloseEvent, /) -> None:
        # 1. Stop listening to workers, then let them finish
        for worker in list(self._workers.values()):
            worker.cancel()
            worker.parsed.disconnect(self.on_parsed)
            worker.failed.disconnect(self.on_parse_failed)
            worker.wait()
        self._workers.clear()

        # 2. Stop the frame loop and release the scene
        self.viewer.shutdown()

        event.accept()

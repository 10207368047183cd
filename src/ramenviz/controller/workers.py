"""
Background Workers (Threading)
==============================
This module contains QThread subclasses for handling long-running tasks.

Why is this file needed?
------------------------
1. Responsiveness: Decoding a large PLY or reading a glTF scene can take a
   while. Running it on the main thread would freeze the steam animation.
2. Signals: Results travel back to the render-loop (GUI) thread through Qt
   Signals, which queues them between frames instead of mid-frame.

Classes:
    ParseWorker: Runs the format parser for one load request.
"""
import logging

from PySide6.QtCore import QThread, Signal

from ramenviz.controller.loader import parse
from ramenviz.model.errors import ParseError

logger = logging.getLogger(__name__)


class ParseWorker(QThread):
    # (request_id, ParsedAsset)
    parsed = Signal(int, object)
    # (request_id, message)
    failed = Signal(int, str)

    def __init__(self, request_id: int, data: bytes, filename: str) -> None:
        super().__init__()
        self.request_id = request_id
        self.data = data
        self.filename = filename

    def run(self) -> None:
        logger.info(f"Parsing '{self.filename}' in background thread...")
        try:
            asset = parse(self.data, self.filename)
        except ParseError as e:
            logger.warning(f"Parse failed for '{self.filename}': {e}")
            self._emit_failure(str(e))
            return
        except Exception as e:
            logger.exception(f"Unexpected error while parsing '{self.filename}'")
            self._emit_failure(f"Unexpected error: {e}")
            return
        finally:
            # The bytes are not needed once decoded
            self.data = b""

        if self.isInterruptionRequested():
            logger.debug(f"Load request {self.request_id} was cancelled, discarding result.")
            return
        self.parsed.emit(self.request_id, asset)

    def cancel(self) -> None:
        self.requestInterruption()

    def _emit_failure(self, message: str) -> None:
        if not self.isInterruptionRequested():
            self.failed.emit(self.request_id, message)

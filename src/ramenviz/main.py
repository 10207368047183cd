"""
Application Initialization
==========================
This module wires logging, the Qt application and the main window together
and starts the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the composition root. It:
1. Configures logging from the command line.
2. Creates the Qt Application.
3. Instantiates the Main Window with the initial visual settings.
4. Optionally starts loading a file passed on the command line.
"""
import argparse
import logging
import sys
from typing import List, Optional

from PySide6.QtWidgets import QApplication

from ramenviz import config
from ramenviz.logging_config import setup_logging
from ramenviz.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=config.APP_ID, description=config.VISIBLE_APP_NAME)
    parser.add_argument("file", nargs="?", help="Point cloud or glTF scene to open on start.")
    parser.add_argument("--log-level", default="info", help="debug, info, warning or error")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file.")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=args.log_level, log_file=args.log_file)

    # 2. Create the Qt Application
    app = QApplication(sys.argv[:1])
    app.setApplicationName(config.VISIBLE_APP_NAME)

    # 3. Initialize the Main Window
    window = MainWindow()
    window.show()

    if args.file:
        logger.info(f"Opening '{args.file}' from the command line.")
        window.load_file(args.file)

    # 4. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()

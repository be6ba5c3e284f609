"""
Application Initialization
==========================
This module constructs the MVC (Model-View-Controller) architecture and starts
the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Instantiates the viewer state (PlanSession).
2. Instantiates the Main Window (View).
3. Passes the session into the View so they can communicate.
4. Prevents circular import errors by being the orchestrator.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from PySide6.QtCore import QCoreApplication, QSettings
from PySide6.QtWidgets import QApplication

from planviewer.config import SETTINGS_ORGANIZATION, SETTINGS_APPLICATION
from planviewer.controller.session import PlanSession
from planviewer.logging_config import setup_logging
from planviewer.view.main_window import MainWindow, VISIBLE_APP_NAME


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="planviewer", description=VISIBLE_APP_NAME)
    parser.add_argument("file", nargs="?", help="Plan file (.json) to open on start-up.")
    parser.add_argument("--debug", action="store_true", help="Verbose logging.")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file.")
    return parser.parse_args(argv)


def create_app(argv: Sequence[str]) -> QApplication:
    """Create and configure the QApplication instance."""
    os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")

    QCoreApplication.setOrganizationName(SETTINGS_ORGANIZATION)
    QCoreApplication.setApplicationName(SETTINGS_APPLICATION)
    QSettings.setDefaultFormat(QSettings.Format.IniFormat)

    app = QApplication(list(argv))
    app.setApplicationDisplayName(VISIBLE_APP_NAME)
    return app


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)

    # 2. Create the Qt Application
    app = create_app([sys.argv[0]])

    # 3. Initialize the viewer state
    session = PlanSession()

    # 4. Initialize the Main Window, passing the session
    window = MainWindow(session)
    window.show()

    if args.file:
        window.open_file(args.file)

    # 5. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()

"""
Logging Configuration
Sets up the 'planviewer' logger and routes Qt's own diagnostics into it.
"""
import logging
import sys
from typing import Optional

from PySide6.QtCore import QMessageLogContext, QtMsgType, qInstallMessageHandler

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
# --debug also shows where a record came from
DEBUG_LOG_FORMAT = LOG_FORMAT + ' [%(filename)s:%(lineno)d]'

_QT_LEVELS: dict[QtMsgType, int] = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}

qt_logger = logging.getLogger("planviewer.qt")


def qt_message_handler(mode: QtMsgType, context: Optional[QMessageLogContext], message: str) -> None:
    """Forward a Qt message (e.g. a QPainter or platform plugin warning) to `planviewer.qt`."""
    qt_logger.log(_QT_LEVELS.get(mode, logging.WARNING), message)


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the 'planviewer' namespace logger.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
    """
    logger = logging.getLogger("planviewer")
    logger.setLevel(level)

    # Re-running (tests, a second window) replaces the handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        DEBUG_LOG_FORMAT if level <= logging.DEBUG else LOG_FORMAT,
        datefmt='%H:%M:%S'
    )

    # 1. Console (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # 2. File (optional, overwritten per session)
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # 3. Qt diagnostics; below --debug only warnings and worse get through
    qt_logger.setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)
    qInstallMessageHandler(qt_message_handler)

    logger.info("Logging initialized.")

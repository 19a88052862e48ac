"""Asynchronous, rotating file logger.

    from file_logger import FileLogger

    with FileLogger("logs", max_file_size=1_000_000, level="info") as log:
        log.info("stored {} documents in {}", 3, "testcol")
"""

from .file_logger import (
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_PREFIX,
    DEFAULT_QUEUE_SIZE,
    FileLogger,
    LogEntry,
    install_loguru_sink,
)
from .interface import ILogger, LogLevel

__all__ = [
    "DEFAULT_MAX_FILE_SIZE",
    "DEFAULT_PREFIX",
    "DEFAULT_QUEUE_SIZE",
    "FileLogger",
    "LogEntry",
    "install_loguru_sink",
    "ILogger",
    "LogLevel",
]

"""Asynchronous file logger with size-based rotation.

Callers enqueue entries onto a bounded queue; one worker thread per logger
formats them in FIFO order and hands each line to a loguru file handler owned
by this logger, writing ``<prefix>-<YYYY-MM-DD>.log``. The handler rotates the
file once it has reached ``max_file_size`` and compresses the rotated file to
zip. A new calendar day gets a new handler and file.

Lines written to the file are loguru records bound with ``file_logger_sink``;
problems inside the worker (failed compression, unwritable files, broken
templates) are reported with ``file_logger_internal=True`` bound. Neither kind
goes back through the logger's own queue, and the logger keeps going.
"""

from __future__ import annotations

import itertools
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, Tuple, Union

from loguru import logger

from .interface import LogLevel

DEFAULT_PREFIX = "chux-datastore-log"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_QUEUE_SIZE = 100
INTERNAL_FLAG = "file_logger_internal"
SINK_FLAG = "file_logger_sink"

_internal = logger.bind(**{INTERNAL_FLAG: True})
_STOP = object()
_sink_ids = itertools.count(1)


@dataclass
class LogEntry:
    level: LogLevel
    message: str
    args: Tuple[Any, ...] = ()
    created: datetime = field(default_factory=datetime.now)

    def render(self) -> str:
        if not self.args:
            return self.message
        try:
            return self.message.format(*self.args)
        except Exception:
            return " ".join([self.message, *map(str, self.args)])


class FileLogger:
    """Queue-backed logger writing to a rotating, dated file."""

    def __init__(
        self,
        log_directory: str | Path,
        log_file_prefix: str = DEFAULT_PREFIX,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        level: LogLevel | str = LogLevel.DEBUG,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        clock: Callable[[], datetime] = datetime.now,
        compression: Union[str, Callable[[str], None]] = "zip",
    ):
        self.log_directory = Path(log_directory)
        self.log_directory.mkdir(parents=True, exist_ok=True)
        self.log_file_prefix = log_file_prefix
        self.max_file_size = max_file_size
        self.level = LogLevel.parse(level)
        self.compression = compression
        self.rotations = 0

        self._clock = clock
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=queue_size)
        self._closed = False
        self._close_lock = threading.Lock()

        self._sink_id = next(_sink_ids)
        self._writer = logger.bind(**{SINK_FLAG: self._sink_id, INTERNAL_FLAG: True})
        self._path = self._file_path()
        self._handler_id: Optional[int] = self._add_handler(self._path)

        self._worker = threading.Thread(
            target=self._run,
            name=f"file-logger-{log_file_prefix}",
            daemon=True,
        )
        self._worker.start()

    # ------------------------------------------------------------------ public API
    @property
    def path(self) -> Path:
        """Path of the file the worker is currently writing to."""

        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    def debug(self, message: str, *args: Any) -> None:
        self.log(LogLevel.DEBUG, message, *args)

    def info(self, message: str, *args: Any) -> None:
        self.log(LogLevel.INFO, message, *args)

    def warn(self, message: str, *args: Any) -> None:
        self.log(LogLevel.WARN, message, *args)

    warning = warn

    def error(self, message: str, *args: Any) -> None:
        self.log(LogLevel.ERROR, message, *args)

    def log(self, level: LogLevel | str, message: str, *args: Any) -> None:
        """Queue an entry; blocks only while the queue is full."""

        level = LogLevel.parse(level)
        if level < self.level or self._closed:
            return
        self._queue.put(LogEntry(level, message, args, self._clock()))

    def flush(self) -> None:
        """Wait until everything queued so far has been written."""

        if self._closed:
            return
        self._queue.join()

    def close(self) -> None:
        """Write what is already queued, stop the worker and close the file.

        Entries logged after ``close`` are ignored.
        """

        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self._queue.put(_STOP)
        self._worker.join()
        self._remove_handler()

    def sink(self, message: Any) -> None:
        """Loguru sink: ``logger.add(file_logger.sink)``."""

        record = message.record
        self.log(_from_loguru_level(record["level"].no), record["message"])

    def __enter__(self) -> "FileLogger":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------ worker
    def _run(self) -> None:
        while True:
            entry = self._queue.get()
            try:
                if entry is _STOP:
                    return
                self._handle(entry)
            except Exception as exc:
                _internal.error("FileLogger dropped an entry for {path}: {error!r}", path=self._path, error=exc)
            finally:
                self._queue.task_done()

    def _handle(self, entry: LogEntry) -> None:
        line = f"{entry.created:%Y/%m/%d %H:%M:%S} {entry.level.name}: {entry.render()}"
        self._switch_day()
        try:
            self._writer.log(entry.level.loguru_name, line)
        except Exception as exc:
            # a failed rotation leaves the handler without an open file; the next write reopens it
            _internal.error("FileLogger could not rotate {path}: {error!r}", path=self._path, error=exc)
            self._writer.log(entry.level.loguru_name, line)

    def _file_path(self) -> Path:
        return self.log_directory / f"{self.log_file_prefix}-{self._clock():%Y-%m-%d}.log"

    def _switch_day(self) -> None:
        path = self._file_path()
        if path != self._path or self._handler_id is None:
            self._remove_handler()
            self._path = path
            self._handler_id = self._add_handler(path)

    def _should_rotate(self, message: Any, file: Any) -> bool:
        file.seek(0, 2)
        if file.tell() < self.max_file_size:
            return False
        self.rotations += 1
        return True

    def _add_handler(self, path: Path) -> int:
        sink_id = self._sink_id
        return logger.add(
            path,
            level=0,
            format="{message}",
            filter=lambda record: record["extra"].get(SINK_FLAG) == sink_id,
            rotation=self._should_rotate,
            compression=self.compression,
            encoding="utf-8",
            catch=False,
        )

    def _remove_handler(self) -> None:
        if self._handler_id is None:
            return
        handler_id, self._handler_id = self._handler_id, None
        try:
            logger.remove(handler_id)
        except ValueError:
            # already dropped by a global logger.remove()
            pass


def _from_loguru_level(number: int) -> LogLevel:
    if number < LogLevel.INFO:
        return LogLevel.DEBUG
    if number < LogLevel.WARN:
        return LogLevel.INFO
    if number < LogLevel.ERROR:
        return LogLevel.WARN
    return LogLevel.ERROR


def install_loguru_sink(file_logger: FileLogger, level: LogLevel | str = LogLevel.DEBUG) -> int:
    """Route loguru records into ``file_logger``; returns the loguru handler id.

    Records the file logger emits itself (its file lines and its own error
    reports) are filtered out.
    """

    return logger.add(
        file_logger.sink,
        level=LogLevel.parse(level).loguru_name,
        format="{message}",
        filter=lambda record: not record["extra"].get(INTERNAL_FLAG),
    )

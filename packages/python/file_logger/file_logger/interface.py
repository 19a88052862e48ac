from __future__ import annotations

from enum import IntEnum
from typing import Any, Protocol


class LogLevel(IntEnum):
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    @classmethod
    def parse(cls, value: "str | int | LogLevel") -> "LogLevel":
        """Accept ``"info"``, ``"WARNING"``, ``30`` or a ``LogLevel``."""

        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int):
            return cls(value)
        name = str(value).strip().upper()
        if name == "WARNING":
            name = "WARN"
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown log level: {value!r}") from None

    @property
    def loguru_name(self) -> str:
        return "WARNING" if self is LogLevel.WARN else self.name


class ILogger(Protocol):
    """Four severity methods taking a ``str.format`` template and positional args."""

    def debug(self, message: str, *args: Any) -> None: ...

    def info(self, message: str, *args: Any) -> None: ...

    def warn(self, message: str, *args: Any) -> None: ...

    def error(self, message: str, *args: Any) -> None: ...

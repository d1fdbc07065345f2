"""Diagnostic sinks passed explicitly into the reconciliation core."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

LOGGER_NAME = "srcverify"


class DiagnosticSink(Protocol):
    """Receiver for diagnostic messages emitted by library code."""

    def debug(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingSink:
    """Forward diagnostics to a stdlib logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    def debug(self, message: str) -> None:
        self.logger.debug(message)

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)


class NullSink:
    """Discard all diagnostics."""

    def debug(self, message: str) -> None:
        _ = message

    def info(self, message: str) -> None:
        _ = message

    def warning(self, message: str) -> None:
        _ = message

    def error(self, message: str) -> None:
        _ = message


@dataclass
class RecordingSink:
    """Keep diagnostics in memory as ``(level, message)`` pairs."""

    records: list[tuple[str, str]] = field(default_factory=list)

    def debug(self, message: str) -> None:
        self.records.append(("debug", message))

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def warning(self, message: str) -> None:
        self.records.append(("warning", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    def messages(self, level: str | None = None) -> list[str]:
        return [msg for lvl, msg in self.records if level is None or lvl == level]

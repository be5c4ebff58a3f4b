"""Logging configuration and the append-only diagnostic log."""

import json
import logging
import os
import sys
from typing import Any

DIAGNOSTIC_LOGGER = "relay.diagnostic"


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


class _DiagnosticFileHandler(logging.FileHandler):
    """Append-only file handler whose open and write failures are dropped."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            super().emit(record)
        except Exception:
            self.handleError(record)

    def handleError(self, record: logging.LogRecord) -> None:
        pass


def _format_part(part: Any) -> str:
    if isinstance(part, str):
        return part
    try:
        return json.dumps(part)
    except (TypeError, ValueError):
        return repr(part)


class DiagnosticLog:
    """Writes one timestamped line per event to a text file.

    Each instance owns its file handler, so two logs never see each
    other's lines. Lines also go to the console through the shared
    `relay.diagnostic` logger. Newlines are escaped so every event stays
    on one line. A write never raises; if the file cannot
    be opened or written the event is only lost, the caller is unaffected.
    """

    def __init__(self, path: str | None = "server.log") -> None:
        self._logger = logging.getLogger(DIAGNOSTIC_LOGGER)
        self.path = os.path.abspath(path) if path else None
        self._handler: logging.Handler | None = None
        if self.path:
            self._handler = _DiagnosticFileHandler(
                self.path, mode="a", encoding="utf-8", delay=True
            )
            self._handler.setFormatter(
                logging.Formatter("[%(asctime)s] %(message)s", datefmt="%Y-%m-%dT%H:%M:%S")
            )

    def write(self, *parts: Any) -> None:
        try:
            message = " ".join(_format_part(p) for p in parts).replace("\n", "\\n")
            record = self._logger.makeRecord(
                self._logger.name, logging.INFO, __file__, 0, message, None, None
            )
            if self._handler is not None:
                self._handler.handle(record)
            self._logger.handle(record)
        except Exception:
            pass

    def close(self) -> None:
        if self._handler is not None:
            self._handler.close()
            self._handler = None

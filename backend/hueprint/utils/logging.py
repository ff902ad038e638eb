"""
Hueprint Structured Logging
Configures loguru once for the palette service and wraps it with an
``extra``-dict API so callers can attach request context to each line.
"""
import sys
from typing import Any, Dict, Optional

from loguru import logger

from hueprint.config import config

LINE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {message} | {extra}"


class StructuredLogger:
    """Loguru wrapper used by the extraction pipeline and the HTTP layer."""

    def __init__(self, level: Optional[str] = None, serialize: Optional[bool] = None):
        self.level = (level or config.LOG_LEVEL).upper()
        self.serialize = config.LOG_JSON if serialize is None else serialize
        self._sink_id = self._install_sink()

    def _install_sink(self) -> int:
        logger.remove()
        # JSON lines when HUEPRINT_LOG_JSON is set, human-readable otherwise
        return logger.add(sys.stdout, format=LINE_FORMAT, level=self.level, serialize=self.serialize)

    def _emit(self, level: str, message: str, extra: Optional[Dict[str, Any]]) -> None:
        target = logger.bind(**extra) if extra else logger
        # depth=2 attributes the record to the caller rather than this wrapper
        target.opt(depth=2).log(level, message)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("DEBUG", message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("ERROR", message, extra)


_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Return the process-wide logger, installing the stdout sink on first use."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Optional

from dependency_injector.resources import Resource

from .handlers import build_json_file_handler, build_human_console_handler

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]")


def log_file_for(logs_dir: Path, run_label: str) -> Path:
    return logs_dir / f"{_UNSAFE.sub('_', run_label)}.jsonl"


class ValidationLogger(Resource):
    """Structured logger for validation runs.

    Event names are the log messages; keyword arguments become structured
    fields. A JSONL file is written only when a run label is given.
    """

    def init(
        self,
        *,
        run_label: Optional[str] = None,
        logs_dir: Path,
        logger_name: str = "oss_compliance",
        console_output: bool = False,
        level: str = "INFO",
    ) -> "ValidationLogger":
        """Initialize handlers.

        Args:
            run_label: Name of the JSONL log file (e.g. ``owner_repo``); no file when None
            logs_dir: Directory to store log files
            logger_name: Logger name
            console_output: Whether to enable console output
            level: Logging level (DEBUG, INFO, WARNING, ERROR)

        Returns:
            Self for dependency_injector Resource pattern
        """
        numeric_level = logging.getLevelName(level.upper())
        if not isinstance(numeric_level, int):
            numeric_level = logging.INFO

        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(numeric_level)
        self._logger.propagate = False

        self._logger.handlers.clear()
        self._handlers: list[logging.Handler] = []
        self.log_file: Optional[Path] = None

        if run_label:
            self.log_file = log_file_for(logs_dir, run_label)
            file_handler = build_json_file_handler(self.log_file, level=numeric_level)
            self._logger.addHandler(file_handler)
            self._handlers.append(file_handler)

        if console_output:
            console_handler = build_human_console_handler(level=numeric_level)
            self._logger.addHandler(console_handler)
            self._handlers.append(console_handler)

        return self

    def shutdown(self, resource: "ValidationLogger") -> None:
        """Flush and close every handler this resource added."""
        for handler in self._handlers:
            handler.flush()
            handler.close()
        self._logger.handlers.clear()

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(message, extra=kwargs or None)

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(message, extra=kwargs or None)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(message, extra=kwargs or None)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._logger.error(message, extra=kwargs or None, exc_info=exc_info)

    def exception(self, message: str, **kwargs: Any) -> None:
        self._logger.exception(message, extra=kwargs or None)

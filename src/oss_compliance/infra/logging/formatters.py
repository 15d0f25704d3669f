from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

_BASE_FIELDS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JSONFormatter(JsonFormatter):
    """JSON-lines formatter built on python-json-logger.

    Structured fields passed through ``extra`` land at the top level of each
    record next to ``level``, ``logger`` and ``event``.
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['event'] = record.getMessage()
        log_record['timestamp'] = self.formatTime(record, "%Y-%m-%dT%H:%M:%S")


class HumanReadableFormatter(logging.Formatter):
    """Console formatter: ``time - LEVEL - event key=value ...``."""

    def __init__(self) -> None:
        super().__init__(
            fmt='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = {k: v for k, v in vars(record).items() if k not in _BASE_FIELDS}
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter


class JSONFormatter(JsonFormatter):
    """One JSON object per record, structured ``extra`` fields included."""

    def __init__(self, *, run_id: str | None = None) -> None:
        super().__init__(timestamp=True)
        self._run_id = run_id

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['message'] = record.getMessage()
        if self._run_id:
            log_record['run_id'] = self._run_id


class HumanReadableFormatter(logging.Formatter):
    """Console formatter; appends the event ``type`` when one is attached."""

    def __init__(self) -> None:
        super().__init__(
            fmt='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        event_type = getattr(record, 'type', None)
        if event_type and event_type != record.getMessage():
            line = f"{line} [{event_type}]"
        return line

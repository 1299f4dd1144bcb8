from __future__ import annotations

import logging
from pathlib import Path

from dependency_injector.resources import Resource

from .handlers import build_json_file_handler, build_human_console_handler


class RunLogger(Resource):
    """Structured logger for one CLI or facade invocation.

    Writes ``<logs_dir>/<run_id>.jsonl`` when a run id is given and can mirror
    records to the console in a human-readable form. Keyword arguments passed
    to the logging methods become structured fields of the record.
    """

    def init(
        self,
        *,
        run_id: str | None = None,
        logs_dir: Path,
        logger_name: str = "repo_insight",
        console_output: bool = False,
        level: str = "INFO",
    ) -> "RunLogger":
        numeric_level = getattr(logging, level.upper())
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(numeric_level)
        self._logger.propagate = False

        self._logger.handlers.clear()
        self._handlers = []
        self.log_file: Path | None = None

        if run_id:
            self.log_file = logs_dir / f"{run_id}.jsonl"
            self._add(build_json_file_handler(self.log_file, level=numeric_level, run_id=run_id))

        if console_output:
            self._add(build_human_console_handler(level=numeric_level))

        return self

    def _add(self, handler: logging.Handler) -> None:
        self._logger.addHandler(handler)
        self._handlers.append(handler)

    def shutdown(self, resource: "RunLogger") -> None:
        """Flush and close handlers so the log file can be read or removed."""
        for handler in self._handlers:
            handler.flush()
            handler.close()
        self._logger.handlers.clear()
        self._handlers = []

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(message, extra=kwargs or None)

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(message, extra=kwargs or None)

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(message, extra=kwargs or None)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        self._logger.error(message, extra=kwargs or None, exc_info=exc_info)

    def exception(self, message: str, **kwargs) -> None:
        self._logger.exception(message, extra=kwargs or None)

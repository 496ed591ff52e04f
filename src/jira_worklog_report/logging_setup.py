from __future__ import annotations

import logging
import os
import sys
import uuid
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(run_id)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(run_id)s"

# attributes every LogRecord has; anything else arrived through extra=
_RECORD_ATTRS = set(logging.makeLogRecord({}).__dict__) | {"message", "asctime", "run_id"}


@dataclass(frozen=True)
class LogSettings:
    run_id: str
    level: int = logging.INFO
    json_mode: bool = False
    log_file: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5

    @classmethod
    def from_env(cls) -> "LogSettings":
        level_name = os.getenv("LOG_LEVEL", "INFO").upper()
        return cls(
            run_id=os.getenv("RUN_ID") or str(uuid.uuid4()),
            level=getattr(logging, level_name, logging.INFO),
            json_mode=os.getenv("LOG_JSON", "false").lower() == "true",
            log_file=os.getenv("LOG_FILE") or None,
            max_bytes=int(os.getenv("LOG_MAX_BYTES", "10485760")),
            backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5")),
        )


class RunIdFilter(logging.Filter):
    def __init__(self, run_id: str) -> None:
        super().__init__()
        self.run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "run_id"):
            record.run_id = self.run_id
        return True


class ExtraFormatter(logging.Formatter):
    """Plain text, with extra= fields appended as key=value."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = [f"{k}={v}" for k, v in record.__dict__.items() if k not in _RECORD_ATTRS]
        return f"{line} {' '.join(extras)}" if extras else line


def _build_formatter(json_mode: bool) -> logging.Formatter:
    if json_mode:
        return JsonFormatter(fmt=JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
    return ExtraFormatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(settings: LogSettings) -> str:
    """
    Console logging on stderr (stdout stays free for command output),
    plus a rotating file when settings.log_file is set.
    """
    root = logging.getLogger()
    root.setLevel(settings.level)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = _build_formatter(settings.json_mode)
    run_filter = RunIdFilter(settings.run_id)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error: Optional[OSError] = None
    if settings.log_file:
        try:
            handlers.append(RotatingFileHandler(
                settings.log_file,
                maxBytes=settings.max_bytes,
                backupCount=settings.backup_count,
                encoding="utf-8",
            ))
        except OSError as e:
            file_error = e

    for h in handlers:
        h.setFormatter(fmt)
        h.addFilter(run_filter)
        root.addHandler(h)

    if settings.level > logging.DEBUG:
        for noisy in ("httpx", "httpcore"):
            logging.getLogger(noisy).setLevel(logging.WARNING)

    log = logging.getLogger(__name__)
    if file_error is not None:
        log.warning("Log file not writable, logging to console only",
                    extra={"log_file": settings.log_file, "error": str(file_error)})
    log.debug("Logging initialized", extra={"json": settings.json_mode})
    return settings.run_id


def setup_logging_from_env() -> str:
    return setup_logging(LogSettings.from_env())

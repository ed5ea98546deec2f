"""Logging for the inventory client.

Two sinks hang off the ``inventory`` logger: a console stream on stderr
(stdout belongs to CLI output) and a daily JSONL file of client events.
Nothing is retried, so the JSONL file is the only trace of a failed
fetch, submit or delete. Every HTTP exchange is written there through
``log_api_call``.
"""

import copy
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from inventory.config import LOG_DIR, LOG_LEVEL

__all__ = [
    "setup_logging",
    "get_logger",
    "resolve_level",
    "log_client_event",
    "log_api_call",
    "LOG_DIR",
]

ROOT_LOGGER = "inventory"


class JSONLFileHandler(logging.Handler):
    """Appends one JSON object per record to ``<prefix>_YYYYMMDD.jsonl``."""

    def __init__(self, log_dir: Path, prefix: str = ROOT_LOGGER):
        super().__init__()
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.prefix = prefix

    def path_for(self, when: datetime) -> Path:
        return self.log_dir / f"{self.prefix}_{when:%Y%m%d}.jsonl"

    def to_entry(self, record: logging.LogRecord) -> Dict[str, Any]:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: Dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        event_type = getattr(record, "event_type", None)
        if event_type:
            entry["event_type"] = event_type
        # Event fields never overwrite the envelope
        for key, value in getattr(record, "extra_data", {}).items():
            entry.setdefault(key, value)
        if record.exc_info:
            entry["exception"] = logging.Formatter().formatException(record.exc_info)
        return entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.to_entry(record), ensure_ascii=False, default=str)
            with open(self.path_for(datetime.now()), "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


class LevelColorFormatter(logging.Formatter):
    """Colors the level name on a terminal, leaving the record untouched."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str, datefmt: Optional[str] = None, use_color: bool = False):
        super().__init__(fmt, datefmt)
        self.use_color = use_color

    def formatMessage(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname) if self.use_color else None
        if not color:
            return super().formatMessage(record)
        # Other handlers see the same record, so color a copy
        colored = copy.copy(record)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().formatMessage(colored)


def resolve_level(value: Union[int, str, None], default: int = logging.WARNING) -> int:
    """Turn a level name ("debug", "WARNING") or number into a logging level."""
    if value is None or value == "":
        return default
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else default


def setup_logging(
    level: Union[int, str, None] = None,
    log_to_file: bool = True,
    log_to_console: bool = True,
    log_dir: Optional[Path] = None,
    stream=None,
) -> logging.Logger:
    """Set up logging for the client.

    Args:
        level: Console level; defaults to INVENTORY_LOG_LEVEL
        log_to_file: Whether to write the JSONL event log
        log_to_console: Whether to log to the console
        log_dir: Custom log directory (default: LOG_DIR)
        stream: Console stream (default: stderr)

    Returns:
        The configured ``inventory`` logger
    """
    console_level = resolve_level(level if level is not None else LOG_LEVEL)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()

    if log_to_console:
        stream = stream or sys.stderr
        console_handler = logging.StreamHandler(stream)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(LevelColorFormatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
            use_color=hasattr(stream, "isatty") and stream.isatty(),
        ))
        logger.addHandler(console_handler)

    if log_to_file:
        file_handler = JSONLFileHandler(log_dir or LOG_DIR)
        file_handler.setLevel(logging.INFO)
        logger.addHandler(file_handler)

    # The file records INFO events even when the console is quieter
    logger.setLevel(min(console_level, logging.INFO) if log_to_file else console_level)
    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Get ``inventory`` or one of its children (``inventory.<name>``)."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def log_client_event(
    event_type: str,
    data: Dict[str, Any],
    level: int = logging.INFO,
    logger_name: str = ROOT_LOGGER,
) -> None:
    """Log a structured client event.

    Args:
        event_type: Type of event (e.g., 'fetch_complete', 'submit_failed')
        data: Event fields; an optional 'message' becomes the log message
        level: Log level
        logger_name: Logger to use
    """
    logger = get_logger(logger_name)
    if not logger.isEnabledFor(level):
        return

    fields = dict(data)
    message = fields.pop("message", event_type)
    logger.log(level, message, extra={"event_type": event_type, "extra_data": fields})


def log_api_call(
    method: str,
    url: str,
    status_code: Optional[int] = None,
    elapsed_ms: Optional[float] = None,
    error: Optional[str] = None,
) -> None:
    """Record one HTTP exchange with the inventory API.

    A missing status code means the request never got a response.
    """
    failed = error is not None or status_code is None or not 200 <= status_code < 300
    outcome = status_code if status_code is not None else "no response"
    data: Dict[str, Any] = {
        "message": f"{method} {url} -> {outcome}",
        "method": method,
        "url": url,
        "status_code": status_code,
    }
    if elapsed_ms is not None:
        data["elapsed_ms"] = round(elapsed_ms, 1)
    if error is not None:
        data["error"] = error
    log_client_event(
        "api_call",
        data,
        level=logging.ERROR if failed else logging.INFO,
        logger_name="client",
    )

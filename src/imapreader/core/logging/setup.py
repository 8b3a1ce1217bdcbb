from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from pythonjsonlogger import jsonlogger

LOG_FILE_PREFIX = "imapreader"
TEXT_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(correlation_id)s %(message)s"

# imapclient dumps raw protocol lines (message bodies included) at DEBUG
QUIET_LOGGERS = ("imapclient", "imapclient.imaplib")


class CorrelationIdFilter(logging.Filter):
    def __init__(self, correlation_id: str):
        super().__init__()
        self._correlation_id = correlation_id

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = self._correlation_id
        return True


def resolve_level(level: int | str | None) -> int:
    if level is None or level == "":
        return logging.INFO
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def _with_filter(handler: logging.Handler, formatter: logging.Formatter, flt: logging.Filter) -> logging.Handler:
    handler.setFormatter(formatter)
    handler.addFilter(flt)
    return handler


def configure_logging(log_dir: Path, correlation_id: str, level: int | str | None = logging.INFO) -> list[Path]:
    log_dir.mkdir(parents=True, exist_ok=True)
    day = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    text_path = log_dir / f"{LOG_FILE_PREFIX}-{day}.log"
    json_path = log_dir / f"{LOG_FILE_PREFIX}-{day}.jsonl"
    resolved = resolve_level(level)

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(resolved)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.INFO))

    correlation_filter = CorrelationIdFilter(correlation_id)
    text_formatter = logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console = _with_filter(logging.StreamHandler(), text_formatter, correlation_filter)
    console.setLevel(logging.WARNING)
    root.addHandler(console)
    root.addHandler(_with_filter(logging.FileHandler(text_path, encoding="utf-8"), text_formatter, correlation_filter))
    root.addHandler(
        _with_filter(
            logging.FileHandler(json_path, encoding="utf-8"),
            jsonlogger.JsonFormatter(fmt=JSON_FORMAT),
            correlation_filter,
        )
    )
    return [text_path, json_path]


def get_logger(name: str, correlation_id: str) -> logging.LoggerAdapter:
    return logging.LoggerAdapter(logging.getLogger(name), extra={"correlation_id": correlation_id})

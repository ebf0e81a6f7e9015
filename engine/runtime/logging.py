"""Engine logging pipeline: console output plus an optional JSON lines file."""

from __future__ import annotations

import json
import logging
import queue
from datetime import UTC, datetime
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path

from engine.api.logging import EngineLoggingConfig

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_QUEUE_LISTENER: QueueListener | None = None


class JsonFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message, traceback."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def configure_engine_logging(config: EngineLoggingConfig) -> None:
    """Route root logging to the console and, when configured, a log file.

    With a file target both handlers are fed from a ``QueueListener`` thread.
    Call ``stop_engine_logging`` to flush it.
    """
    global _QUEUE_LISTENER

    stop_engine_logging()
    handlers = [_with_format(logging.StreamHandler(), config.console_format)]
    if config.file_path:
        path = Path(config.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _with_format(logging.FileHandler(path, encoding="utf-8", delay=True), config.file_format)
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, config.level_name.upper(), logging.INFO))
    if len(handlers) == 1:
        root.addHandler(handlers[0])
        return

    records: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
    root.addHandler(QueueHandler(records))
    _QUEUE_LISTENER = QueueListener(records, *handlers, respect_handler_level=True)
    _QUEUE_LISTENER.start()


def stop_engine_logging() -> None:
    """Flush and stop the file streaming listener if one is running."""
    global _QUEUE_LISTENER

    if _QUEUE_LISTENER is not None:
        _QUEUE_LISTENER.stop()
        _QUEUE_LISTENER = None


def _with_format(handler: logging.Handler, kind: str) -> logging.Handler:
    is_json = kind.strip().lower() == "json"
    handler.setFormatter(JsonFormatter() if is_json else logging.Formatter(_TEXT_FORMAT))
    return handler

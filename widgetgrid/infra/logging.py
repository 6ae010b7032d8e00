"""Console logging plus an optional JSON-lines run log.

The run log is written by a ``QueueListener`` thread so widget operations
never block on file I/O. Call ``shutdown_logging`` to flush it.
"""

from __future__ import annotations

import logging
import queue
from datetime import UTC, datetime
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path

from widgetgrid.infra.config import WorkspaceSettings
from widgetgrid.infra.json_codec import dumps_text

__all__ = ["TEXT_FORMAT", "JsonLineFormatter", "run_log_path", "setup_logging", "shutdown_logging"]

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Attributes every record carries; anything else arrived through ``extra=``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_listener: QueueListener | None = None


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record, with ``extra=`` fields inlined."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES and key not in entry:
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return dumps_text(entry, default=str)


def run_log_path(logs_dir: Path, started: datetime | None = None) -> Path:
    """Path of the run log for a session started at ``started``."""
    stamp = (started or datetime.now(UTC)).strftime("%Y%m%dT%H%M%S")
    return logs_dir / f"widgetgrid_run_{stamp}.jsonl"


def setup_logging(
    settings: WorkspaceSettings,
    *,
    to_file: bool = True,
    force: bool = False,
) -> Path | None:
    """Install console and run-log handlers on the root logger.

    Leaves an already configured root logger alone unless ``force`` is set,
    so host applications keep their own handlers. Returns the run log path
    when one was opened.
    """
    root = logging.getLogger()
    if root.handlers and not force:
        return None
    shutdown_logging()
    root.handlers.clear()
    root.setLevel(settings.log_level)

    console = logging.StreamHandler()
    if settings.log_format == "json":
        console.setFormatter(JsonLineFormatter())
    else:
        console.setFormatter(logging.Formatter(TEXT_FORMAT))
    if not to_file:
        root.addHandler(console)
        return None

    path = run_log_path(settings.logs_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    run_log = logging.FileHandler(path, encoding="utf-8", delay=True)
    run_log.setFormatter(JsonLineFormatter())

    global _listener
    records: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
    root.addHandler(QueueHandler(records))
    _listener = QueueListener(records, console, run_log, respect_handler_level=True)
    _listener.start()
    logging.getLogger(__name__).info("run_log=%s", path)
    return path


def shutdown_logging() -> None:
    """Stop the run-log listener, flushing queued records."""
    global _listener
    if _listener is None:
        return
    _listener.stop()
    for handler in _listener.handlers:
        handler.close()
    _listener = None

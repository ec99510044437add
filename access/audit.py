# EduFam Access - decision audit trail (every decision logged, reasons never leave the server)
import json
import logging
import logging.handlers
import queue
from collections import deque
from pathlib import Path

from .models import DecisionAuditEntry

AUDIT_LOGGER_NAME = "access.audit"
DEFAULT_SAMPLE_SIZE = 200

_memory: deque[dict] = deque(maxlen=DEFAULT_SAMPLE_SIZE)
_queue_listener: logging.handlers.QueueListener | None = None

_audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
_audit_logger.setLevel(logging.INFO)
_audit_logger.propagate = False


class AuditFileHandler(logging.Handler):
    """Append one JSON line per decision."""

    def __init__(self, filepath: Path):
        super().__init__()
        self.filepath = Path(filepath)
        self.filepath.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, record):
        entry = getattr(record, "audit_entry", None)
        if entry is None:
            return
        try:
            with open(self.filepath, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")
        except Exception:
            self.handleError(record)


class AuditMemoryHandler(logging.Handler):
    def emit(self, record):
        entry = getattr(record, "audit_entry", None)
        if entry is not None:
            _memory.append(entry)


_memory_handler = AuditMemoryHandler()
_audit_logger.addHandler(_memory_handler)


def configure_audit(log_file: Path | None = None, sample_size: int = DEFAULT_SAMPLE_SIZE) -> None:
    """Set the sample size and (re)start the file pipeline; file IO runs on the listener thread."""
    global _memory, _queue_listener
    if sample_size != _memory.maxlen:
        _memory = deque(_memory, maxlen=sample_size)
    shutdown_audit()
    if log_file is None:
        return
    audit_queue: queue.Queue = queue.Queue(-1)
    queue_handler = logging.handlers.QueueHandler(audit_queue)
    _audit_logger.addHandler(queue_handler)
    _queue_listener = logging.handlers.QueueListener(
        audit_queue, AuditFileHandler(log_file), respect_handler_level=True,
    )
    _queue_listener.start()


def shutdown_audit() -> None:
    global _queue_listener
    for handler in list(_audit_logger.handlers):
        if isinstance(handler, logging.handlers.QueueHandler):
            _audit_logger.removeHandler(handler)
    if _queue_listener is not None:
        _queue_listener.stop()
        _queue_listener = None


def log_decision(entry: DecisionAuditEntry) -> None:
    record = logging.LogRecord(
        name=AUDIT_LOGGER_NAME, level=logging.INFO, pathname="", lineno=0,
        msg="access decision", args=(), exc_info=None,
    )
    record.audit_entry = entry.model_dump(mode="json")
    _audit_logger.handle(record)


def get_audit_sample(limit: int = 50) -> list[dict]:
    """Most recent decisions, newest last."""
    if limit <= 0:
        return []
    return list(_memory)[-limit:]


def clear_audit_sample() -> None:
    _memory.clear()

"""Bounded in-memory copy of recent log records, served by /debug/logs."""

import logging
import threading
import time
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from .config import Config

PACKAGE_LOGGER = "storefront_gateway"


class LogEntry(BaseModel):
    id: str
    timestamp: str
    level: str
    message: str
    meta: Optional[Dict[str, Any]] = None


class DebugLogBuffer:
    """Newest-first ring buffer; once full, the oldest entry is dropped."""

    def __init__(self, capacity: int = 50):
        self.capacity = capacity
        self._entries = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def append(self, level: str, message: str, meta: Optional[Dict[str, Any]] = None) -> str:
        entry = LogEntry(
            id=f"log_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}",
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            message=message,
            meta=meta,
        )
        with self._lock:
            self._entries.appendleft(entry)
        return entry.id

    def entries(self) -> List[LogEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class MemoryLogHandler(logging.Handler):
    """Copies log records into a DebugLogBuffer."""

    def __init__(self, buffer: DebugLogBuffer, level: int = logging.DEBUG):
        super().__init__(level)
        self.buffer = buffer

    def emit(self, record: logging.LogRecord) -> None:
        try:
            meta = getattr(record, "meta", None)
            self.buffer.append(
                record.levelname.lower(),
                record.getMessage(),
                meta if isinstance(meta, dict) else None,
            )
        except Exception:
            self.handleError(record)


def configure_logging(config: Config, buffer: DebugLogBuffer) -> MemoryLogHandler:
    """
    Set up console logging and route package logs into the debug buffer.

    Only one buffer receives records at a time: a handler left behind by an
    earlier app instance is replaced.
    """
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(config.LOG_LEVEL)
    for handler in list(package_logger.handlers):
        if isinstance(handler, MemoryLogHandler):
            package_logger.removeHandler(handler)

    handler = MemoryLogHandler(buffer)
    package_logger.addHandler(handler)
    return handler

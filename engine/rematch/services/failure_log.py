"""Failure log: database errors behind the generic 500 responses.

Endpoints answer failures with a fixed ``{"error": ...}`` message; the real
cause is logged with its traceback and kept here so operators can look it up
through ``/api/errors`` without reading server logs.
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FailureRecord:
    source: str  # e.g. "settings.prompt.write", "buyers.create"
    error_type: str
    message: str
    buyer_id: Optional[str] = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["occurred_at"] = self.occurred_at.isoformat()
        return data


class FailureLog:
    """Bounded log of recent failures plus a running count per source."""

    def __init__(self, max_records: int = 500):
        self._records: deque[FailureRecord] = deque(maxlen=max_records)
        self._by_source: Counter[str] = Counter()
        self._lock = Lock()

    def record(self, source: str, error: BaseException, buyer_id: Optional[str] = None) -> FailureRecord:
        entry = FailureRecord(
            source=source,
            error_type=type(error).__name__,
            message=str(error),
            buyer_id=buyer_id,
        )
        with self._lock:
            self._records.append(entry)
            self._by_source[source] += 1
        return entry

    def recent(
        self,
        source: Optional[str] = None,
        buyer_id: Optional[str] = None,
        limit: int = 50,
    ) -> list[FailureRecord]:
        """Newest first, optionally narrowed to one source or one buyer."""
        with self._lock:
            entries = list(reversed(self._records))
        if source:
            entries = [e for e in entries if e.source == source]
        if buyer_id:
            entries = [e for e in entries if e.buyer_id == buyer_id]
        return entries[:limit]

    def counts(self) -> dict[str, int]:
        """Failures per source since the last clear, including evicted records."""
        with self._lock:
            return dict(self._by_source)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._by_source.clear()

    def __len__(self) -> int:
        return len(self._records)


failure_log = FailureLog()


def report_failure(source: str, error: BaseException, buyer_id: Optional[str] = None) -> None:
    """Log a failure with its traceback and keep it in the failure log."""
    if buyer_id:
        logger.error("%s failed for buyer %s: %s", source, buyer_id, error, exc_info=error)
    else:
        logger.error("%s failed: %s", source, error, exc_info=error)
    failure_log.record(source, error, buyer_id=buyer_id)

import itertools
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

LogStatus = Literal["processing", "complete", "error"]
ProcessingStatus = Literal["idle", "processing", "completed", "error"]

_STATUS_BY_LAST_ENTRY: dict[LogStatus, ProcessingStatus] = {
    "processing": "processing",
    "complete": "completed",
    "error": "error",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LogDetails:
    file_name: str | None = None
    date: str | None = None
    category: str | None = None
    amount: str | int | float | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize with display-layer key names, omitting unset fields."""
        raw = {
            "fileName": self.file_name,
            "date": self.date,
            "category": self.category,
            "amount": self.amount,
            "errorCode": self.error_code,
        }
        return {key: value for key, value in raw.items() if value is not None}


@dataclass(frozen=True)
class LogEntry:
    id: str
    status: LogStatus
    message: str
    timestamp: datetime
    details: LogDetails = field(default_factory=LogDetails)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "status": self.status,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details.to_dict(),
        }


class PresentationLog:
    """Append-only, ordered list of per-file status entries for one session."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._entries: list[LogEntry] = []
        self._ids = itertools.count(1)

    def append(self, entry: LogEntry) -> LogEntry:
        self._entries.append(entry)
        return entry

    def record(
        self,
        status: LogStatus,
        message: str,
        details: LogDetails | None = None,
    ) -> LogEntry:
        """Build an entry stamped with the next id and the current time, then append it."""
        entry = LogEntry(
            id=f"log-{next(self._ids)}",
            status=status,
            message=message,
            timestamp=self._clock(),
            details=details or LogDetails(),
        )
        return self.append(entry)

    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def processing_status(self) -> ProcessingStatus:
        """Summarize the session by the newest entry."""
        if not self._entries:
            return "idle"
        return _STATUS_BY_LAST_ENTRY[self._entries[-1].status]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(tuple(self._entries))

import time
from collections.abc import Callable
from dataclasses import dataclass

from app.analysis.models import AnalysisResult
from app.logging.logger import Log

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry:
    result: AnalysisResult
    stored_at: float


class ResultCache:
    """Maps file fingerprints to analysis results for a fixed time-to-live.

    Expired entries are evicted lazily on lookup. There is no size bound: the
    cache lives only as long as the server process.
    """

    DEFAULT_TTL_SECONDS = 300.0

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Clock = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, fingerprint: str) -> AnalysisResult | None:
        """Return the fresh result for ``fingerprint``, or None."""
        entry = self._entries.get(fingerprint)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self._ttl:
            del self._entries[fingerprint]
            Log.debug("cache.expired", fingerprint=fingerprint)
            return None
        return entry.result

    def put(self, fingerprint: str, result: AnalysisResult) -> None:
        """Store ``result``, replacing any previous entry."""
        self._entries[fingerprint] = CacheEntry(result=result, stored_at=self._clock())

    def __len__(self) -> int:
        return len(self._entries)

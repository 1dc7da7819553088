"""In-process cache of analysis reports keyed by CV id."""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass
from typing import Callable

from atsboost.config import settings
from atsboost.schemas import AnalysisReport


@dataclass
class _CacheEntry:
    report: AnalysisReport
    timestamp: float
    content_hash: str


def content_hash(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class AnalysisCache:
    """
    Reports expire after ``ttl_seconds`` and are dropped as soon as the CV
    content they were computed from changes.
    """

    def __init__(self, ttl_seconds: int | None = None, clock: Callable[[], float] = time.time) -> None:
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.analysis_cache_ttl_seconds
        self._clock = clock
        self._entries: dict[int, _CacheEntry] = {}

    def _expired(self, entry: _CacheEntry, now: float) -> bool:
        return now - entry.timestamp > self.ttl_seconds

    def get(self, cv_id: int, content: str) -> AnalysisReport | None:
        entry = self._entries.get(cv_id)
        if entry is None:
            return None
        if self._expired(entry, self._clock()) or entry.content_hash != content_hash(content):
            del self._entries[cv_id]
            return None
        return entry.report

    def set(self, cv_id: int, content: str, report: AnalysisReport) -> None:
        self._entries[cv_id] = _CacheEntry(
            report=report,
            timestamp=self._clock(),
            content_hash=content_hash(content),
        )

    def invalidate(self, cv_id: int) -> bool:
        return self._entries.pop(cv_id, None) is not None

    def cleanup(self) -> int:
        """Evict expired entries and return how many were removed."""
        now = self._clock()
        expired = [cv_id for cv_id, entry in self._entries.items() if self._expired(entry, now)]
        for cv_id in expired:
            del self._entries[cv_id]
        return len(expired)

    def size(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()


_analysis_cache: AnalysisCache | None = None


def get_analysis_cache() -> AnalysisCache:
    """Get the analysis cache instance (singleton)."""
    global _analysis_cache
    if _analysis_cache is None:
        _analysis_cache = AnalysisCache()
    return _analysis_cache

from atsboost.libs.analysis_cache import AnalysisCache
from atsboost.schemas import AnalysisReport


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _report(score: int = 70) -> AnalysisReport:
    return AnalysisReport(score=score, rating="Good")


def test_get_returns_cached_report_for_same_content():
    cache = AnalysisCache(ttl_seconds=60, clock=FakeClock())
    cache.set(1, "cv text", _report())

    assert cache.get(1, "cv text") == _report()
    assert cache.get(2, "cv text") is None


def test_changed_content_evicts_entry():
    cache = AnalysisCache(ttl_seconds=60, clock=FakeClock())
    cache.set(1, "cv text", _report())

    assert cache.get(1, "edited cv text") is None
    assert cache.size() == 0


def test_expired_entry_is_evicted_on_get():
    clock = FakeClock()
    cache = AnalysisCache(ttl_seconds=60, clock=clock)
    cache.set(1, "cv text", _report())

    clock.now += 61
    assert cache.get(1, "cv text") is None
    assert cache.size() == 0


def test_cleanup_removes_only_expired_entries():
    clock = FakeClock()
    cache = AnalysisCache(ttl_seconds=60, clock=clock)
    cache.set(1, "old", _report())
    clock.now += 30
    cache.set(2, "new", _report())
    clock.now += 40

    assert cache.cleanup() == 1
    assert cache.size() == 1
    assert cache.get(2, "new") is not None


def test_invalidate():
    cache = AnalysisCache(ttl_seconds=60, clock=FakeClock())
    cache.set(1, "cv text", _report())

    assert cache.invalidate(1) is True
    assert cache.invalidate(1) is False

from fastapi import FastAPI
from fastapi.testclient import TestClient

from atsboost.middleware import RateLimitMiddleware
from atsboost.middleware.rate_limit import _RateLimitState


def _build_app(**options):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, **options)

    @app.post("/api/upload")
    async def upload():
        return {"ok": True}

    @app.get("/api/health")
    async def health():
        return {"ok": True}

    return app


def test_limits_requests_on_configured_paths():
    client = TestClient(_build_app(path_prefixes=["/api/upload"], limit=2, window=60, enabled=True))

    assert client.post("/api/upload").status_code == 200
    assert client.post("/api/upload").status_code == 200
    response = client.post("/api/upload")

    assert response.status_code == 429
    assert response.json()["error"] == "Too many requests"
    assert response.json()["limit"] == 2
    assert 1 <= int(response.headers["Retry-After"]) <= 60


def test_other_paths_are_not_limited():
    client = TestClient(_build_app(path_prefixes=["/api/upload"], limit=1, window=60, enabled=True))

    for _ in range(5):
        assert client.get("/api/health").status_code == 200


def test_disabled_limiter_passes_everything():
    client = TestClient(_build_app(path_prefixes=["/api/upload"], limit=1, window=60, enabled=False))

    for _ in range(3):
        assert client.post("/api/upload").status_code == 200


def test_expired_client_windows_are_pruned():
    middleware = RateLimitMiddleware(FastAPI(), path_prefixes=["/api/upload"], limit=1, window=60, enabled=True)
    middleware._states["10.0.0.1"] = _RateLimitState(window_start=1000.0, count=1)
    middleware._states["10.0.0.2"] = _RateLimitState(window_start=1050.0, count=1)

    middleware._prune(1070.0)

    assert list(middleware._states) == ["10.0.0.2"]

# ─────────────────────────────────────────────────────────────────────────────
# Test Fixtures — shared across all tests
# ─────────────────────────────────────────────────────────────────────────────

import os

import pytest
from fastapi.testclient import TestClient

from memcached_admin.client import RESULT_MESSAGES, ResultCode
from memcached_admin.config import Settings
from memcached_admin.main import create_app
from memcached_admin.schemas import RawServerStats
from memcached_admin.services.admin import MemcachedAdminService

MB = 1024 * 1024


class FakeMemcachedClient:
    """In-memory stand-in for the memcached client contract."""

    def __init__(
        self,
        stats: RawServerStats | None = None,
        *,
        flush_code: ResultCode = ResultCode.SUCCESS,
        stats_code: ResultCode = ResultCode.SUCCESS,
        message: str | None = None,
    ) -> None:
        self.stats = stats if stats is not None else {}
        self.flush_code = flush_code
        self.stats_code = stats_code
        self.message = message
        self.flush_calls = 0
        self.stats_calls = 0
        self._code = ResultCode.SUCCESS

    def flush(self) -> None:
        self.flush_calls += 1
        self._code = self.flush_code

    def get_stats(self) -> RawServerStats:
        self.stats_calls += 1
        self._code = self.stats_code
        return self.stats if self.stats_code == ResultCode.SUCCESS else {}

    def get_result_code(self) -> ResultCode:
        return self._code

    def get_result_message(self) -> str:
        return self.message or RESULT_MESSAGES[self._code]


@pytest.fixture
def raw_stats() -> RawServerStats:
    """Two servers, the second one missing most counters."""
    return {
        "10.0.0.1:11211": {
            "bytes": 100 * MB,
            "limit_max_bytes": 200 * MB,
            "curr_items": 10,
            "curr_connections": 5,
            "total_connections": 42,
            "cmd_get": 1000,
            "cmd_set": 250,
            "get_hits": 900,
            "get_misses": 100,
            "uptime": 3600,
        },
        "10.0.0.2:11211": {
            "bytes": 0,
            "limit_max_bytes": 64 * MB,
        },
    }


@pytest.fixture
def fake_client(raw_stats: RawServerStats) -> FakeMemcachedClient:
    return FakeMemcachedClient(raw_stats)


@pytest.fixture
def admin_service(fake_client: FakeMemcachedClient) -> MemcachedAdminService:
    return MemcachedAdminService(fake_client)


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing, plain console logs."""
    return Settings(
        memcached_servers="10.0.0.1:11211,10.0.0.2:11211",
        log_json=False,
        log_level="DEBUG",
    )


@pytest.fixture
def client(test_settings: Settings, admin_service: MemcachedAdminService) -> TestClient:
    """FastAPI TestClient with a fake memcached client behind the service.

    The lifespan is not entered (no `with`), so app.state is filled here and
    no socket is ever opened.
    """
    from memcached_admin.config import get_settings

    get_settings.cache_clear()

    env_overrides = {
        "LOG_JSON": "false",
        "LOG_LEVEL": "DEBUG",
    }
    for k, v in env_overrides.items():
        os.environ[k] = v

    try:
        app = create_app()
        client = TestClient(app)

        app.state.settings = test_settings
        app.state.admin_service = admin_service

        return client
    finally:
        for k in env_overrides:
            os.environ.pop(k, None)
        get_settings.cache_clear()


@pytest.fixture
def make_fake_client() -> type[FakeMemcachedClient]:
    """Factory for tests that need a client with specific result codes."""
    return FakeMemcachedClient

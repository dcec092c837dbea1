# ─────────────────────────────────────────────────────────────────────────────
# Memcached Admin Service — flush + stats façade over a memcached client
# ─────────────────────────────────────────────────────────────────────────────
# Unbound (no client) → every operation raises ClientNotConfiguredError.
# Bound (client given at construction) is the only other state; the client
# reference never changes afterwards. A failed call is reported once, never
# retried. Each operation and the read of its result code run under one
# service lock, so a concurrent request cannot swap in its own outcome.
# ─────────────────────────────────────────────────────────────────────────────

from __future__ import annotations

import threading

import structlog

from memcached_admin.client import MemcachedClient, PymemcacheClient, ResultCode
from memcached_admin.config import Settings
from memcached_admin.exceptions import ClientNotConfiguredError, OperationFailedError
from memcached_admin.schemas import CacheInfo, RawServerStats, ServerReport
from memcached_admin.services import stats_aggregator

logger = structlog.get_logger(__name__)


class MemcachedAdminService:
    """Operational façade: flush the cluster, report its statistics."""

    def __init__(self, client: MemcachedClient | None = None) -> None:
        self._client = client
        self._lock = threading.Lock()

    @property
    def is_bound(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> MemcachedClient | None:
        return self._client

    def assert_client_bound(self) -> MemcachedClient:
        if self._client is None:
            raise ClientNotConfiguredError()
        return self._client

    def flush(self) -> ResultCode:
        """Flush every server; returns the client's result code unchanged."""
        code, _ = self.flush_with_message()
        return code

    def flush_with_message(self) -> tuple[ResultCode, str]:
        """Flush, then read code and message of that same flush."""
        client = self.assert_client_bound()
        with self._lock:
            client.flush()
            code = client.get_result_code()
            message = client.get_result_message()
        logger.info("memcached_flush", code=int(code))
        return code, message

    def result_message(self) -> str:
        """Message of the client's most recent operation."""
        client = self.assert_client_bound()
        with self._lock:
            return client.get_result_message()

    def stats(self, verbose: bool = False) -> list[ServerReport]:
        """Per-server metric report; basic (2 metrics) or verbose (8)."""
        raw = self._fetch_stats()
        report = stats_aggregator.build_report(raw, verbose=verbose)
        logger.info("memcached_stats_built", servers=len(report), verbose=verbose)
        return report

    def info(self) -> CacheInfo:
        """Cluster hit ratio plus per-server uptime."""
        raw = self._fetch_stats()
        return CacheInfo(
            hit_ratio=stats_aggregator.hit_ratio(raw),
            uptime=stats_aggregator.uptimes(raw),
        )

    def _fetch_stats(self) -> RawServerStats:
        """Raw stats, or OperationFailedError. Never a partial map."""
        client = self.assert_client_bound()
        with self._lock:
            raw = client.get_stats()
            code = client.get_result_code()
            message = client.get_result_message()
        if code != ResultCode.SUCCESS:
            raise OperationFailedError(code, message)
        return raw or {}


def create_admin_service(settings: Settings) -> MemcachedAdminService:
    """Build a service bound to the configured servers (unbound if none)."""
    servers = settings.server_list
    if not servers:
        logger.warning("memcached_client_not_configured", hint="Set MEMCACHED_SERVERS")
        return MemcachedAdminService()

    client = PymemcacheClient(
        servers,
        connect_timeout=settings.memcached_connect_timeout,
        timeout=settings.memcached_timeout,
    )
    logger.info("memcached_client_configured", servers=servers)
    return MemcachedAdminService(client)

# ─────────────────────────────────────────────────────────────────────────────
# Memcached Client — result-code contract + pymemcache adapter
# ─────────────────────────────────────────────────────────────────────────────
# The admin core only talks to the MemcachedClient protocol. PymemcacheClient
# keeps one pymemcache base Client per server (keyed "host:port", config
# order) and turns transport faults into result codes, so callers read the
# outcome of the last operation through get_result_code()/get_result_message().
#
# One lock per instance serializes operations, so two threads never share a
# pymemcache socket. Reading the result of a call is a separate step: callers
# that need "operation + result" as one unit hold their own lock around both
# (MemcachedAdminService does).
# ─────────────────────────────────────────────────────────────────────────────

from __future__ import annotations

import socket
import threading
from collections.abc import Callable
from enum import IntEnum
from typing import Any, Protocol, TypeVar

import structlog

from memcached_admin.schemas import RawServerStats

logger = structlog.get_logger(__name__)

DEFAULT_PORT = 11211

T = TypeVar("T")


class ResultCode(IntEnum):
    """Operation outcome, numbered like libmemcached's RES_* constants."""

    SUCCESS = 0
    FAILURE = 1
    HOST_LOOKUP_FAILURE = 2
    WRITE_FAILURE = 5
    UNKNOWN_READ_FAILURE = 7
    PROTOCOL_ERROR = 8
    CLIENT_ERROR = 9
    SERVER_ERROR = 10
    CONNECTION_FAILURE = 11
    SOME_ERRORS = 19
    NO_SERVERS = 20
    TIMEOUT = 31


RESULT_MESSAGES: dict[ResultCode, str] = {
    ResultCode.SUCCESS: "SUCCESS",
    ResultCode.FAILURE: "FAILURE",
    ResultCode.HOST_LOOKUP_FAILURE: "HOSTNAME LOOKUP FAILURE",
    ResultCode.WRITE_FAILURE: "WRITE FAILURE",
    ResultCode.UNKNOWN_READ_FAILURE: "UNKNOWN READ FAILURE",
    ResultCode.PROTOCOL_ERROR: "PROTOCOL ERROR",
    ResultCode.CLIENT_ERROR: "CLIENT ERROR",
    ResultCode.SERVER_ERROR: "SERVER ERROR",
    ResultCode.CONNECTION_FAILURE: "CONNECTION FAILURE",
    ResultCode.SOME_ERRORS: "SOME ERRORS WERE REPORTED",
    ResultCode.NO_SERVERS: "NO SERVERS DEFINED",
    ResultCode.TIMEOUT: "A TIMEOUT OCCURRED",
}


class MemcachedClient(Protocol):
    """What the admin service needs from a memcached client."""

    def flush(self) -> None: ...

    def get_result_code(self) -> ResultCode: ...

    def get_result_message(self) -> str: ...

    def get_stats(self) -> RawServerStats: ...


def parse_server(server: str) -> tuple[str, int]:
    """Split "host:port" or "[ipv6]:port" (port optional) into a server tuple.

    Raises ValueError for an empty host, a bad port, or an unbracketed IPv6
    literal (``::1`` is ambiguous once a port is appended).
    """
    value = server.strip()
    if value.startswith("["):
        host, closed, rest = value[1:].partition("]")
        if not closed or (rest and not rest.startswith(":")):
            raise ValueError(f"Invalid memcached server {server!r}: malformed [ipv6]:port")
        port = rest[1:]
    elif value.count(":") > 1:
        raise ValueError(
            f"Invalid memcached server {server!r}: write IPv6 addresses as [addr]:port"
        )
    else:
        host, _, port = value.partition(":")

    if not host:
        raise ValueError(f"Invalid memcached server {server!r}: missing host")
    if not port:
        return host, DEFAULT_PORT
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(
            f"Invalid memcached server {server!r}: port must be a number between 1 and 65535"
        )
    return host, int(port)


def classify_error(exc: Exception) -> ResultCode:
    """Map a pymemcache / socket exception onto a result code."""
    from pymemcache.exceptions import (
        MemcacheClientError,
        MemcacheServerError,
        MemcacheUnexpectedCloseError,
        MemcacheUnknownError,
    )

    if isinstance(exc, (socket.timeout, TimeoutError)):
        return ResultCode.TIMEOUT
    if isinstance(exc, socket.gaierror):
        return ResultCode.HOST_LOOKUP_FAILURE
    if isinstance(exc, MemcacheUnexpectedCloseError):
        return ResultCode.UNKNOWN_READ_FAILURE
    if isinstance(exc, MemcacheServerError):
        return ResultCode.SERVER_ERROR
    if isinstance(exc, MemcacheClientError):
        return ResultCode.CLIENT_ERROR
    if isinstance(exc, MemcacheUnknownError):
        return ResultCode.PROTOCOL_ERROR
    if isinstance(exc, OSError):
        return ResultCode.CONNECTION_FAILURE
    return ResultCode.FAILURE


class PymemcacheClient:
    """MemcachedClient backed by one pymemcache base Client per server."""

    def __init__(
        self,
        servers: list[str],
        *,
        connect_timeout: float | None = None,
        timeout: float | None = None,
        client_factory: Callable[..., Any] | None = None,
    ) -> None:
        if client_factory is None:
            from pymemcache.client.base import Client

            client_factory = Client

        self._clients: dict[str, Any] = {
            server: client_factory(
                parse_server(server),
                connect_timeout=connect_timeout,
                timeout=timeout,
            )
            for server in servers
        }
        self._lock = threading.Lock()
        self._result_code = ResultCode.SUCCESS
        self._result_message = RESULT_MESSAGES[ResultCode.SUCCESS]

    @property
    def servers(self) -> list[str]:
        return list(self._clients)

    def get_result_code(self) -> ResultCode:
        return self._result_code

    def get_result_message(self) -> str:
        return self._result_message

    def flush(self) -> None:
        """Flush every server (``flush_all``); outcome lands in the result code."""
        from pymemcache.exceptions import MemcacheServerError

        def _flush(client: Any) -> bool:
            if not client.flush_all(noreply=False):
                raise MemcacheServerError("flush_all was not acknowledged")
            return True

        self._run_on_all("flush", _flush)

    def get_stats(self) -> RawServerStats:
        """Numeric `stats` counters of every reachable server, config order."""
        results = self._run_on_all("stats", lambda client: client.stats())
        return {server: _numeric_stats(raw) for server, raw in results.items()}

    def close(self) -> None:
        with self._lock:
            for client in self._clients.values():
                client.close()

    def _run_on_all(self, operation: str, func: Callable[[Any], T]) -> dict[str, T]:
        with self._lock:
            return self._run_on_all_locked(operation, func)

    def _run_on_all_locked(self, operation: str, func: Callable[[Any], T]) -> dict[str, T]:
        """Run ``func`` on every server and record the aggregate outcome."""
        from pymemcache.exceptions import MemcacheError

        if not self._clients:
            self._set_result(ResultCode.NO_SERVERS)
            return {}

        results: dict[str, T] = {}
        failures: list[tuple[str, ResultCode]] = []
        for server, client in self._clients.items():
            try:
                results[server] = func(client)
            except (OSError, MemcacheError) as exc:
                code = classify_error(exc)
                failures.append((server, code))
                logger.warning(
                    "memcached_server_failed",
                    operation=operation,
                    server=server,
                    code=code.name,
                    error=str(exc),
                )

        if not failures:
            self._set_result(ResultCode.SUCCESS)
        elif len(failures) == len(self._clients):
            self._set_result(failures[0][1])
        else:
            self._set_result(ResultCode.SOME_ERRORS)
        return results

    def _set_result(self, code: ResultCode) -> None:
        self._result_code = code
        self._result_message = RESULT_MESSAGES[code]


# memcached's own spelling → the counter names the stats pipeline reads
STAT_ALIASES: dict[str, str] = {
    "limit_maxbytes": "limit_max_bytes",
}


def _numeric_stats(raw: dict[Any, Any]) -> dict[str, int | float]:
    """Decode byte keys, keep numeric values only (version strings etc. go)."""
    stats: dict[str, int | float] = {}
    for key, value in raw.items():
        name = key.decode() if isinstance(key, bytes) else str(key)
        name = STAT_ALIASES.get(name, name)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            stats[name] = value
    return stats

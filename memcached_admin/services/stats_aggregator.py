# ─────────────────────────────────────────────────────────────────────────────
# Stats Aggregator — raw multi-server stats → ordered ServerReports
# ─────────────────────────────────────────────────────────────────────────────
# Server order follows the client's enumeration order (no sorting).
# Metric order per server: current size, used %, then in verbose mode
# max size, items, current connections, total connections, gets, sets.
# ─────────────────────────────────────────────────────────────────────────────

from typing import Any

from memcached_admin.schemas import MemcachedStat, MetricRecord, RawServerStats, ServerReport
from memcached_admin.services import metric_formatter as fmt

BYTES_PER_MEGABYTE = 1024 * 1024
PRECISION = 5


def cache_sizes(server: dict[str, int | float]) -> tuple[float, float, float]:
    """(current MB, max MB, used %) for one server.

    A zero ceiling yields 0.0 used rather than a division by zero.
    """
    size_mb = fmt.read_counter(server, MemcachedStat.bytes) / BYTES_PER_MEGABYTE
    max_mb = round(
        fmt.read_counter(server, MemcachedStat.limit_max_bytes) / BYTES_PER_MEGABYTE, PRECISION
    )
    used = round(size_mb / max_mb * 100, PRECISION) if max_mb else 0.0
    return size_mb, max_mb, used


def build_server_report(name: str, server: dict[str, int | float], verbose: bool) -> ServerReport:
    size_mb, max_mb, used = cache_sizes(server)

    metrics: list[MetricRecord] = [
        fmt.current_cache_size_mb(size_mb, max_mb),
        fmt.cache_used_percent(used),
    ]

    if verbose:
        metrics += [
            fmt.max_cache_size_mb(max_mb),
            fmt.total_items(server),
            fmt.current_connections(server),
            fmt.total_connections(server),
            fmt.total_gets(server),
            fmt.total_sets(server),
        ]

    return ServerReport(name=name, metrics=tuple(metrics))


def build_report(raw_stats: RawServerStats, verbose: bool = False) -> list[ServerReport]:
    """One ServerReport per server entry, in input order."""
    return [build_server_report(name, server or {}, verbose) for name, server in raw_stats.items()]


def hit_ratio(raw_stats: RawServerStats) -> float:
    """Cluster get hit ratio in percent (2 places), 0.0 without get traffic."""
    hits = sum(fmt.read_counter(s or {}, MemcachedStat.get_hits) for s in raw_stats.values())
    misses = sum(fmt.read_counter(s or {}, MemcachedStat.get_misses) for s in raw_stats.values())
    total = hits + misses
    return round(hits / total * 100, 2) if total > 0 else 0.0


def uptimes(raw_stats: RawServerStats) -> dict[str, int]:
    """Uptime in seconds per server, 0 when the counter is missing."""
    return {
        name: int(fmt.read_counter(server or {}, MemcachedStat.uptime))
        for name, server in raw_stats.items()
    }


def serialize_report(report: list[ServerReport]) -> list[dict[str, Any]]:
    """JSON-ready payload: camelCase metric keys, maxValue only where set."""
    return [
        {
            "name": server.name,
            "metrics": [
                metric.model_dump(mode="json", by_alias=True, exclude_none=True)
                for metric in server.metrics
            ],
        }
        for server in report
    ]

# ─────────────────────────────────────────────────────────────────────────────
# Metric Formatter — raw readings → MetricRecord
# ─────────────────────────────────────────────────────────────────────────────
# One pure constructor per metric kind. Name, description and unit are fixed
# per kind. Counters missing from a server's stats read as 0 so a report
# always renders, even against a partially-instrumented server.
# ─────────────────────────────────────────────────────────────────────────────

from collections.abc import Mapping

from memcached_admin.schemas import MemcachedStat, MetricRecord, UnitCode, UnitText

Number = int | float


def read_counter(server: Mapping[str, Number], stat: MemcachedStat) -> Number:
    """Counter value from a raw server map, 0 when absent."""
    return server.get(stat, 0) or 0


def cache_used_percent(pct: Number) -> MetricRecord:
    return MetricRecord(
        name="Cache used",
        description="Cache used in percentage",
        value=pct,
        unit_code=UnitCode.percent,
        unit_text=UnitText.percent,
    )


def current_cache_size_mb(size: Number, max_size: Number) -> MetricRecord:
    """Current size, carrying the size ceiling (both in megabytes)."""
    return MetricRecord(
        name="Current cache size",
        description="Current size of the cache in megabytes",
        value=size,
        unit_code=UnitCode.megabyte,
        unit_text=UnitText.megabyte,
        max_value=max_size,
    )


def max_cache_size_mb(max_size: Number) -> MetricRecord:
    return MetricRecord(
        name="Maximum cache size",
        description="Maximum size of the cache in megabytes",
        value=max_size,
        unit_code=UnitCode.megabyte,
        unit_text=UnitText.megabyte,
    )


def _count(name: str, description: str, value: Number) -> MetricRecord:
    return MetricRecord(
        name=name,
        description=description,
        value=value,
        unit_code=UnitCode.unit,
        unit_text=UnitText.unit,
    )


def current_connections(server: Mapping[str, Number]) -> MetricRecord:
    return _count(
        "Current connections",
        "Number of current connections",
        read_counter(server, MemcachedStat.curr_connections),
    )


def total_connections(server: Mapping[str, Number]) -> MetricRecord:
    return _count(
        "Total connections",
        "Total number of connections",
        read_counter(server, MemcachedStat.total_connections),
    )


def total_gets(server: Mapping[str, Number]) -> MetricRecord:
    return _count(
        "Get operations",
        "Total number of get operations",
        read_counter(server, MemcachedStat.cmd_get),
    )


def total_items(server: Mapping[str, Number]) -> MetricRecord:
    return _count(
        "Total items",
        "Total number of items stored in the cache",
        read_counter(server, MemcachedStat.curr_items),
    )


def total_sets(server: Mapping[str, Number]) -> MetricRecord:
    return _count(
        "Set operations",
        "Total number of set operations",
        read_counter(server, MemcachedStat.cmd_set),
    )

# ─────────────────────────────────────────────────────────────────────────────
# Property-Based Tests — Hypothesis
# ─────────────────────────────────────────────────────────────────────────────
# Invariants of the formatter and aggregator for arbitrary counter maps:
# zero-defaults, metric cardinality, order preservation, unit consistency,
# and stateless formatting.
# ─────────────────────────────────────────────────────────────────────────────

from hypothesis import given, settings
from hypothesis import strategies as st

from memcached_admin.schemas import MemcachedStat
from memcached_admin.services import metric_formatter as fmt
from memcached_admin.services.stats_aggregator import build_report

# ─── Strategies ──────────────────────────────────────────────────────────────

counter_names = st.sampled_from([stat.value for stat in MemcachedStat])

counter_values = st.integers(min_value=0, max_value=2**40)

server_stats = st.dictionaries(counter_names, counter_values, max_size=len(MemcachedStat))

server_ids = st.from_regex(r"10\.0\.[0-9]{1,3}\.[0-9]{1,3}:1121[0-9]", fullmatch=True)

raw_stats = st.dictionaries(server_ids, server_stats, max_size=8)

COUNTER_FACTORIES = {
    MemcachedStat.curr_connections: fmt.current_connections,
    MemcachedStat.total_connections: fmt.total_connections,
    MemcachedStat.cmd_get: fmt.total_gets,
    MemcachedStat.curr_items: fmt.total_items,
    MemcachedStat.cmd_set: fmt.total_sets,
}


class TestAggregatorProperties:
    @given(stats=raw_stats, verbose=st.booleans())
    @settings(max_examples=200)
    def test_cardinality(self, stats, verbose: bool) -> None:
        expected = 8 if verbose else 2
        for server in build_report(stats, verbose=verbose):
            assert len(server.metrics) == expected

    @given(stats=raw_stats, verbose=st.booleans())
    def test_order_preserved(self, stats, verbose: bool) -> None:
        assert [s.name for s in build_report(stats, verbose=verbose)] == list(stats)

    @given(stats=raw_stats)
    def test_current_size_value_and_max_share_unit(self, stats) -> None:
        for server in build_report(stats):
            size = server.metrics[0]
            assert size.max_value is not None
            assert size.unit_code == fmt.max_cache_size_mb(size.max_value).unit_code

    @given(server=server_stats)
    def test_never_raises_and_usage_is_finite(self, server) -> None:
        (report,) = build_report({"s:1": server}, verbose=True)
        used = report.metrics[1].value
        assert used == used  # not NaN
        assert used >= 0


class TestFormatterProperties:
    @given(server=server_stats)
    def test_missing_counters_read_zero(self, server) -> None:
        for stat, factory in COUNTER_FACTORIES.items():
            assert factory(server).value == server.get(stat.value, 0)

    @given(server=server_stats)
    def test_formatting_is_stateless(self, server) -> None:
        for factory in COUNTER_FACTORIES.values():
            assert factory(server) == factory(server)

    @given(size=st.floats(0, 1e6), max_size=st.floats(0, 1e6))
    def test_size_record_is_stable(self, size: float, max_size: float) -> None:
        assert fmt.current_cache_size_mb(size, max_size) == fmt.current_cache_size_mb(
            size, max_size
        )

# ─────────────────────────────────────────────────────────────────────────────
# Tests for the metric formatter — one constructor per metric kind
# ─────────────────────────────────────────────────────────────────────────────

import pytest
from pydantic import ValidationError

from memcached_admin.schemas import MetricRecord, UnitCode, UnitText
from memcached_admin.services import metric_formatter as fmt

SERVER = {
    "curr_connections": 7,
    "total_connections": 120,
    "cmd_get": 5000,
    "curr_items": 33,
    "cmd_set": 800,
}

COUNTERS = [
    (fmt.current_connections, "Current connections", 7),
    (fmt.total_connections, "Total connections", 120),
    (fmt.total_gets, "Get operations", 5000),
    (fmt.total_items, "Total items", 33),
    (fmt.total_sets, "Set operations", 800),
]


class TestSizeMetrics:
    def test_cache_used_percent(self) -> None:
        metric = fmt.cache_used_percent(42.5)
        assert metric.name == "Cache used"
        assert metric.description == "Cache used in percentage"
        assert metric.value == 42.5
        assert metric.unit_code == UnitCode.percent
        assert metric.unit_text == UnitText.percent
        assert metric.max_value is None

    def test_current_cache_size_carries_max(self) -> None:
        metric = fmt.current_cache_size_mb(12.5, 64.0)
        assert metric.name == "Current cache size"
        assert metric.value == 12.5
        assert metric.max_value == 64.0
        assert metric.unit_code == UnitCode.megabyte
        assert metric.unit_text == UnitText.megabyte

    def test_max_cache_size(self) -> None:
        metric = fmt.max_cache_size_mb(64.0)
        assert metric.name == "Maximum cache size"
        assert metric.description == "Maximum size of the cache in megabytes"
        assert metric.value == 64.0
        assert metric.unit_code == UnitCode.megabyte
        assert metric.max_value is None


class TestCounterMetrics:
    @pytest.mark.parametrize(("factory", "name", "expected"), COUNTERS)
    def test_reads_counter(self, factory, name: str, expected: int) -> None:
        metric = factory(SERVER)
        assert metric.name == name
        assert metric.value == expected
        assert metric.unit_code == UnitCode.unit
        assert metric.unit_text == UnitText.unit

    @pytest.mark.parametrize(("factory", "name", "expected"), COUNTERS)
    def test_missing_counter_defaults_to_zero(self, factory, name: str, expected: int) -> None:
        assert factory({}).value == 0

    def test_unrelated_counters_ignored(self) -> None:
        assert fmt.total_items({"cmd_get": 10}).value == 0


class TestRecordShape:
    def test_records_are_frozen(self) -> None:
        metric = fmt.cache_used_percent(1.0)
        with pytest.raises(ValidationError):
            metric.value = 2.0  # type: ignore[misc]

    def test_same_input_same_record(self) -> None:
        assert fmt.current_cache_size_mb(1.5, 3.0) == fmt.current_cache_size_mb(1.5, 3.0)

    def test_unit_symbol(self) -> None:
        assert fmt.cache_used_percent(1).unit_symbol == "%"
        assert fmt.max_cache_size_mb(1).unit_symbol == "MB"
        assert fmt.total_sets({}).unit_symbol == ""

    def test_camel_case_serialization(self) -> None:
        data = fmt.current_cache_size_mb(1.0, 2.0).model_dump(by_alias=True)
        assert data["unitCode"] == "4L"
        assert data["unitText"] == "megabyte"
        assert data["maxValue"] == 2.0

    def test_accepts_field_names_and_aliases(self) -> None:
        by_name = MetricRecord(name="x", description="y", value=1, unit_code=UnitCode.percent)
        by_alias = MetricRecord(name="x", description="y", value=1, unitCode="P1")
        assert by_name == by_alias

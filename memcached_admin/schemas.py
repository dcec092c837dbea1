# ─────────────────────────────────────────────────────────────────────────────
# Pydantic v2 Schemas — metric records, server reports, response envelopes
# ─────────────────────────────────────────────────────────────────────────────


from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UnitCode(StrEnum):
    """UN/CEFACT common codes for the units a metric can carry."""

    unit = "C62"  # Dimensionless count
    percent = "P1"
    megabyte = "4L"


class UnitText(StrEnum):
    """Human-readable unit names, paired with UnitCode."""

    unit = "unit"
    percent = "percent"
    megabyte = "megabyte"


UNIT_SYMBOLS: dict[UnitCode, str] = {
    UnitCode.unit: "",
    UnitCode.percent: "%",
    UnitCode.megabyte: "MB",
}


class MemcachedStat(StrEnum):
    """Counter names read from the raw `stats` output of a memcached server."""

    bytes = "bytes"
    limit_max_bytes = "limit_max_bytes"
    curr_connections = "curr_connections"
    total_connections = "total_connections"
    cmd_get = "cmd_get"
    cmd_set = "cmd_set"
    curr_items = "curr_items"
    get_hits = "get_hits"
    get_misses = "get_misses"
    uptime = "uptime"


class Skin(StrEnum):
    """Response detail level requested through ``?skin=``."""

    main = "main"
    full = "full"


RawServerStats = dict[str, dict[str, int | float]]


class MetricRecord(BaseModel):
    """One derived statistic (name, description, value, unit, optional max).

    ``max_value`` is only set on the current cache size and always shares
    the unit of ``value``.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str
    description: str
    value: int | float
    unit_code: UnitCode = UnitCode.unit
    unit_text: UnitText = UnitText.unit
    max_value: int | float | None = None

    @property
    def unit_symbol(self) -> str:
        return UNIT_SYMBOLS[self.unit_code]


class ServerReport(BaseModel):
    """Ordered metrics of a single server, named by its host:port id."""

    model_config = ConfigDict(frozen=True)

    name: str
    metrics: tuple[MetricRecord, ...] = ()


class CacheInfo(BaseModel):
    """Cluster-wide hit ratio plus the uptime of every server."""

    model_config = ConfigDict(frozen=True)

    hit_ratio: float = Field(..., ge=0, le=100, description="Get hit ratio in percent")
    uptime: dict[str, int] = Field(default_factory=dict, description="Seconds per server")


class SuccessEnvelope(BaseModel):
    """Generic success envelope returned by every admin route."""

    status: str = "success"
    result: Any = None


class LivenessResponse(BaseModel):
    """Liveness probe: minimal, near-zero cost."""

    status: str = "ok"


class ReadinessResponse(BaseModel):
    """Readiness probe: is a memcached client bound?"""

    status: str  # "ready" or "not_ready"
    client_bound: bool
    servers: list[str]

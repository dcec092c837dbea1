# ─────────────────────────────────────────────────────────────────────────────
# Settings — Pydantic v2 BaseSettings
# ─────────────────────────────────────────────────────────────────────────────


from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from memcached_admin.client import parse_server


class Settings(BaseSettings):
    """Admin configuration sourced from environment variables.

    Uses pydantic-settings v2 (separate package from pydantic).
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env")

    # ── Memcached cluster ────────────────────────────────────────────────────
    # Comma-separated "host:port" list (e.g. "10.0.0.1:11211,10.0.0.2:11211").
    # Empty string = no client bound; every admin operation is rejected.
    memcached_servers: str = "localhost:11211"
    memcached_connect_timeout: float = 2.0
    memcached_timeout: float = 5.0

    # ── HTTP server ──────────────────────────────────────────────────────────
    port: int = 8080

    # ── CLI ──────────────────────────────────────────────────────────────────
    command_clear: bool = False  # Clear the terminal before every command run

    # ── Logging ──────────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool = True

    @field_validator("memcached_servers")
    @classmethod
    def servers_must_parse(cls, v: str) -> str:
        """Reject entries like "localhost:abc" at load time, not on first use."""
        for server in v.split(","):
            if server.strip():
                parse_server(server)
        return v

    @property
    def server_list(self) -> list[str]:
        """Parsed server identifiers, configuration order preserved."""
        return [s.strip() for s in self.memcached_servers.split(",") if s.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()

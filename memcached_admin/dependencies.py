# ─────────────────────────────────────────────────────────────────────────────
# Dependency Injection — FastAPI Depends() providers
# ─────────────────────────────────────────────────────────────────────────────
# State flows: lifespan creates → app.state stores → Depends() injects.
# ─────────────────────────────────────────────────────────────────────────────


from fastapi import Request

from memcached_admin.config import Settings
from memcached_admin.services.admin import MemcachedAdminService


def get_admin_service(request: Request) -> MemcachedAdminService:
    """Inject MemcachedAdminService into endpoints via Depends()."""
    return request.app.state.admin_service  # type: ignore[no-any-return]


def get_settings_dep(request: Request) -> Settings:
    """Inject Settings into endpoints via Depends()."""
    return request.app.state.settings  # type: ignore[no-any-return]

# ─────────────────────────────────────────────────────────────────────────────
# Memcached Routes — flush, stats, info
# ─────────────────────────────────────────────────────────────────────────────
# GET /memcached/flush            → {"status": "success", "result": true}
# GET /memcached/stats[?skin=full] → envelope with the per-server report
# GET /memcached/info             → envelope with hit ratio + uptimes
#
# Service calls block on the memcached sockets, so they run in the default
# executor, inside a copy of the request context so service and client log
# events keep the request_id bound by the middleware. Anything the client
# raises that is not already a MemcachedAdminError is wrapped in
# ClientFaultError here; the exception handlers render the 500 envelope.
# ─────────────────────────────────────────────────────────────────────────────

import asyncio
import contextvars
import functools
from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import APIRouter, Depends, Query

from memcached_admin.client import ResultCode
from memcached_admin.dependencies import get_admin_service
from memcached_admin.exceptions import ClientFaultError, MemcachedAdminError, OperationFailedError
from memcached_admin.schemas import Skin, SuccessEnvelope
from memcached_admin.services.admin import MemcachedAdminService
from memcached_admin.services.stats_aggregator import serialize_report

router = APIRouter(prefix="/memcached")

T = TypeVar("T")


async def _call(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    loop = asyncio.get_running_loop()
    try:
        context = contextvars.copy_context()
        call = functools.partial(context.run, func, *args, **kwargs)
        return await loop.run_in_executor(None, call)
    except MemcachedAdminError:
        raise
    except Exception as exc:
        raise ClientFaultError(str(exc)) from exc


@router.get("/flush", response_model=SuccessEnvelope)
async def flush(service: MemcachedAdminService = Depends(get_admin_service)) -> SuccessEnvelope:
    """Flush every server of the cluster."""
    code, message = await _call(service.flush_with_message)
    if code != ResultCode.SUCCESS:
        raise OperationFailedError(code, message)
    return SuccessEnvelope(result=True)


@router.get("/stats", response_model=SuccessEnvelope)
async def stats(
    skin: str | None = Query(None, description="'full' adds capacity and traffic metrics"),
    service: MemcachedAdminService = Depends(get_admin_service),
) -> SuccessEnvelope:
    """Per-server cache statistics.

    Response schema:
    {
        "status": "success",
        "result": [
            {
                "name": "10.0.0.1:11211",
                "metrics": [
                    {"name": "Current cache size", "value": 100.0, "unitCode": "4L",
                     "unitText": "megabyte", "maxValue": 200.0, ...},
                    {"name": "Cache used", "value": 50.0, "unitCode": "P1", ...}
                ]
            }
        ]
    }
    """
    report = await _call(service.stats, verbose=skin == Skin.full)
    return SuccessEnvelope(result=serialize_report(report))


@router.get("/info", response_model=SuccessEnvelope)
async def info(service: MemcachedAdminService = Depends(get_admin_service)) -> SuccessEnvelope:
    """Cluster get hit ratio and per-server uptime."""
    cache_info = await _call(service.info)
    return SuccessEnvelope(result=cache_info.model_dump(mode="json"))

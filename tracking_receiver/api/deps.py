"""FastAPI dependencies resolving services from ``app.state``."""

import json
from typing import Any

from fastapi import Depends, Request

from tracking_receiver.services.container import ServiceContainer
from tracking_receiver.services.ingest_service import IngestService
from tracking_receiver.services.lookup_service import LookupService


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_ingest_service(container: ServiceContainer = Depends(get_container)) -> IngestService:
    return container.ingest


def get_lookup_service(container: ServiceContainer = Depends(get_container)) -> LookupService:
    return container.lookup


async def read_json_body(request: Request) -> Any:
    """Decode the request body as JSON; empty or malformed bodies give None."""
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, ValueError):
        return None


async def require_api_key(
    request: Request,
    container: ServiceContainer = Depends(get_container),
) -> None:
    """FastAPI dependency enforcing the shared API key.

    Usage::

        @router.get("/orders/{order_id}", dependencies=[Depends(require_api_key)])
        async def get_order(...):
            ...
    """
    body = await read_json_body(request)
    params: dict[str, Any] = dict(body) if isinstance(body, dict) else {}
    params.update(request.query_params)
    await container.gate.authenticate(request.headers, params)

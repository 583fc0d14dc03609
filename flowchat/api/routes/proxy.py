"""Development proxy that forwards ``/langflow/*`` to a local Langflow.

The client falls back to this mount when no base URL is configured, which
lets a local Langflow instance be reached without configuring CORS.
"""

import logging
from collections.abc import Mapping

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from flowchat.api.dependencies import get_container
from flowchat.core.container import AppContainer

router = APIRouter()
logger = logging.getLogger(__name__)

PROXY_PREFIX = "/langflow"

_HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "content-encoding",
        "content-length",
        "host",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)


def _forwardable(headers: Mapping[str, str]) -> dict[str, str]:
    return {key: value for key, value in headers.items() if key.lower() not in _HOP_BY_HOP_HEADERS}


def build_target_url(target_base: str, path: str, query: str) -> str:
    url = f"{target_base.rstrip('/')}/{path.lstrip('/')}"
    if query:
        url = f"{url}?{query}"
    return url


@router.api_route(
    PROXY_PREFIX + "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def proxy_langflow(
    path: str,
    request: Request,
    container: AppContainer = Depends(get_container),
) -> Response:
    settings = container.settings
    if not settings.dev_mode:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    url = build_target_url(settings.proxy_target_url, path, request.url.query)
    body = await request.body()
    try:
        upstream = await container.http_client.request(
            request.method,
            url,
            content=body,
            headers=_forwardable(request.headers),
            timeout=settings.proxy_timeout_sec,
        )
    except httpx.TimeoutException as exc:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail="langflow proxy timed out."
        ) from exc
    except httpx.TransportError as exc:
        logger.warning("Dev proxy failed to reach %s: %s", settings.proxy_target_url, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=f"langflow proxy error: {exc}"
        ) from exc

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        headers=_forwardable(upstream.headers),
    )

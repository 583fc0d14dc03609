import logging
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from flowchat.api import dependencies
from flowchat.api.routes import chat, proxy
from flowchat.core.container import AppContainer
from flowchat.core.logging import (
    configure_logging,
    generate_request_id,
    reset_request_id,
    set_request_id,
)
from flowchat.core.settings import AppSettings, get_settings
from flowchat.providers.langflow import LangflowClient
from flowchat.services.chat_session import ChatSession

logger = logging.getLogger(__name__)


def build_container(settings: AppSettings, http_client: httpx.AsyncClient) -> AppContainer:
    langflow = LangflowClient(settings, http_client)
    return AppContainer(
        settings=settings,
        http_client=http_client,
        langflow=langflow,
        chat_session=ChatSession(langflow),
    )


def create_app(settings: AppSettings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        http_client = httpx.AsyncClient(timeout=settings.request_timeout_sec)
        app.state.container = build_container(settings, http_client)
        if not app.state.container.langflow.is_configured:
            logger.warning(
                "Langflow is not configured; set LANGFLOW_FLOW_ID and LANGFLOW_API_KEY",
                extra={"event": "langflow_unconfigured"},
            )
        try:
            yield
        finally:
            await http_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(chat.router, prefix="/api/v1")
    app.include_router(proxy.router)

    @app.middleware("http")
    async def add_request_id_context(request: Request, call_next):
        incoming = request.headers.get("X-Request-ID")
        request_id = incoming or generate_request_id()
        request.state.request_id = request_id
        token = set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/health")
    async def health(client: LangflowClient = Depends(dependencies.get_langflow_client)):
        return {
            "app": settings.app_name,
            "version": settings.app_version,
            "langflow": {"base_url": client.base_url, "dev_mode": settings.dev_mode},
        }

    @app.get("/ready")
    async def ready(
        client: LangflowClient = Depends(dependencies.get_langflow_client),
    ) -> dict[str, Any]:
        configured = client.is_configured
        return {
            "status": "ok" if configured else "degraded",
            "langflow_configured": configured,
        }

    return app


_settings = get_settings()
configure_logging(_settings.log_level)
app = create_app(_settings)

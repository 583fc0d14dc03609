from fastapi import Depends, Request

from flowchat.core.container import AppContainer
from flowchat.core.settings import AppSettings
from flowchat.providers.langflow import LangflowClient
from flowchat.services.chat_session import ChatSession


def get_container(request: Request) -> AppContainer:
    container: AppContainer | None = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Application container is not initialized.")
    return container


def get_langflow_client(container: AppContainer = Depends(get_container)) -> LangflowClient:
    return container.langflow


def get_chat_session(container: AppContainer = Depends(get_container)) -> ChatSession:
    return container.chat_session


def get_app_settings(container: AppContainer = Depends(get_container)) -> AppSettings:
    return container.settings

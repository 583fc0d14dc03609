from dataclasses import dataclass

import httpx

from flowchat.core.settings import AppSettings
from flowchat.providers.langflow import LangflowClient
from flowchat.services.chat_session import ChatSession


@dataclass
class AppContainer:
    settings: AppSettings
    http_client: httpx.AsyncClient
    langflow: LangflowClient
    chat_session: ChatSession

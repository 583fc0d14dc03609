import logging
import time
from uuid import uuid4

from flowchat.providers.langflow import LangflowClient

logger = logging.getLogger(__name__)


class EmptyPromptError(ValueError):
    pass


class ChatSession:
    """One chat client lifetime: a fixed session id shared by every turn."""

    def __init__(self, client: LangflowClient, session_id: str | None = None):
        self._client = client
        self.session_id = session_id or str(uuid4())

    @property
    def is_configured(self) -> bool:
        return self._client.is_configured

    async def send(self, prompt: str, session_id: str | None = None) -> str:
        text = prompt.strip()
        if not text:
            raise EmptyPromptError("prompt is empty.")

        effective_session = session_id or self.session_id
        start = time.monotonic()
        reply = await self._client.send_prompt(text, session_id=effective_session)
        logger.info(
            "Chat turn completed",
            extra={
                "session_id": effective_session,
                "latency_ms": round((time.monotonic() - start) * 1000, 1),
                "event": "chat_turn_done",
            },
        )
        return reply

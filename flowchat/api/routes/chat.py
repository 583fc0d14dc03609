import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from flowchat.api.dependencies import get_chat_session, get_langflow_client
from flowchat.providers.langflow import (
    FlowConfigurationError,
    FlowError,
    FlowTimeoutError,
    LangflowClient,
)
from flowchat.schemas.chat import ChatRequest, ChatResponse, ChatStatusResponse
from flowchat.services.chat_session import ChatSession, EmptyPromptError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/chat", response_model=ChatResponse)
async def post_chat(
    body: ChatRequest,
    session: ChatSession = Depends(get_chat_session),
) -> ChatResponse:
    session_id = body.session_id or session.session_id
    try:
        reply = await session.send(body.prompt, session_id=session_id)
    except EmptyPromptError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except FlowConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except FlowTimeoutError as exc:
        logger.warning("Langflow timed out", extra={"session_id": session_id})
        raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(exc)) from exc
    except FlowError as exc:
        logger.warning("Langflow call failed: %s", exc, extra={"session_id": session_id})
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except httpx.TransportError as exc:
        logger.exception("Langflow transport failure", extra={"session_id": session_id})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"langflow unreachable: {exc.__class__.__name__}: {exc}",
        ) from exc

    return ChatResponse(reply=reply, session_id=session_id)


@router.get("/chat/status", response_model=ChatStatusResponse)
async def get_chat_status(
    client: LangflowClient = Depends(get_langflow_client),
    session: ChatSession = Depends(get_chat_session),
) -> ChatStatusResponse:
    return ChatStatusResponse(
        configured=client.is_configured,
        base_url=client.base_url,
        session_id=session.session_id,
    )

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    prompt: str = Field(..., min_length=1, description="User input text")
    session_id: str | None = Field(
        default=None,
        description="Optional session id. If omitted, the server session id is used.",
    )


class ChatResponse(BaseModel):
    reply: str
    session_id: str


class ChatStatusResponse(BaseModel):
    configured: bool
    base_url: str
    session_id: str

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class ChatMessage(BaseModel):
    role: str = ""
    content: str = ""

    @field_validator("role", "content", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(default_factory=list)
    model: str | None = None
    max_tokens: int | None = None

    @field_validator("messages", mode="before")
    @classmethod
    def _only_message_objects(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [m for m in value if isinstance(m, dict)]

    @field_validator("model", mode="before")
    @classmethod
    def _model_name(cls, value: Any) -> str | None:
        return value if isinstance(value, str) and value else None

    @field_validator("max_tokens", mode="before")
    @classmethod
    def _positive_int(cls, value: Any) -> int | None:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            return None
        return value


class ReplyEnvelope(BaseModel):
    ok: Literal[True] = True
    reply: str = ""
    raw: Any = None


class ErrorEnvelope(BaseModel):
    ok: Literal[False] = False
    error: str

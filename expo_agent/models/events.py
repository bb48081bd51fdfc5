# Role: Wire shapes shared by both transports. ChatRequest is the inbound payload,
# RelayEvent the outbound notification (WebSocket JSON frame / SSE data line).

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, field_validator

EventType = Literal["status", "delta", "final", "error"]


class ChatRequest(BaseModel):
    text: str = ""
    key: Optional[str] = None

    @field_validator("text", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        # Mirrors String(payload.text || ""): falsy -> "", everything else stringified.
        if not value:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("key", mode="before")
    @classmethod
    def _string_key_only(cls, value: Any) -> Optional[str]:
        # Only a string overrides the default credential.
        return value if isinstance(value, str) else None


class RelayEvent(BaseModel):
    role: Literal["assistant"] = "assistant"
    type: EventType
    content: str

    @classmethod
    def status(cls, content: str) -> "RelayEvent":
        return cls(type="status", content=content)

    @classmethod
    def delta(cls, content: str) -> "RelayEvent":
        return cls(type="delta", content=content)

    @classmethod
    def final(cls, content: str) -> "RelayEvent":
        return cls(type="final", content=content)

    @classmethod
    def error(cls, content: str) -> "RelayEvent":
        return cls(type="error", content=content)

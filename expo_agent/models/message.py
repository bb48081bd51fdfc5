# Role: Single transcript message. Immutable once created; the timestamp stays local
# and only {role, content} is sent upstream.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant", "system"]


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_api(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}

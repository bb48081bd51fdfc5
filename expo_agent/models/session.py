# Role: Per-connection state container for the WebSocket transport. Holds the transcript
# (system message first, chronological after) plus the single-slot in-flight flag.

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field

from expo_agent.models.message import Message


class Session(BaseModel):
    session_id: str
    transcript: List[Message] = Field(default_factory=list)

    # Key line: at most one turn streams per connection at a time.
    in_flight: bool = False

    turn_count: int = 0

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

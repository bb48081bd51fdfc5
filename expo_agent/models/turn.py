# Role: Output of turn preparation. Both transports build their upstream messages from it,
# so classification and steering cannot drift between WebSocket and SSE.

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from expo_agent.models.intent import Intent
from expo_agent.models.message import Message


@dataclass(frozen=True)
class TurnPlan:
    intent: Intent
    user_message: Message
    instruction: Message

    def messages(self) -> List[Message]:
        # Real query first, steering instruction second (two consecutive user turns).
        return [self.user_message, self.instruction]

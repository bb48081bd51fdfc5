# Role: One-shot transport. A single POST returns a text/event-stream; every fragment is one
# `data:` line, followed by the [FINAL] sentinel or a JSON error line, then the stream ends.

from __future__ import annotations

import json
from typing import AsyncIterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from expo_agent.api.deps import get_controller
from expo_agent.core.flow_controller import RelayController
from expo_agent.models.events import ChatRequest, RelayEvent

router = APIRouter(tags=["chat"])

FINAL_SENTINEL = "[FINAL]"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(event: RelayEvent) -> str:
    if event.type == "error":
        return f"data: {json.dumps({'error': event.content}, ensure_ascii=False)}\n\n"
    if event.type == "final":
        return f"data: {FINAL_SENTINEL}\n\n"
    # Fragments are written raw.
    return f"data: {event.content}\n\n"


@router.post("/api/chat-stream", response_class=StreamingResponse)
@router.post("/chat-stream", response_class=StreamingResponse, include_in_schema=False)
async def chat_stream(req: ChatRequest, controller: RelayController = Depends(get_controller)):
    async def event_stream() -> AsyncIterator[str]:
        async for event in controller.one_shot(req):
            yield format_sse(event)

    return StreamingResponse(event_stream(), media_type="text/event-stream", headers=SSE_HEADERS)

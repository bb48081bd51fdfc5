# Role: Full-duplex transport. One WebSocket connection = one session; every text frame is one turn.
# Events go out as JSON frames. A frame arriving while a reply streams is rejected, not queued.

from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import aclosing, suppress
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from expo_agent.api.deps import get_controller
from expo_agent.core.flow_controller import BUSY_MESSAGE, RelayController
from expo_agent.models.events import ChatRequest, RelayEvent

logger = logging.getLogger("expo_agent.ws")

router = APIRouter(tags=["chat"])

INTERNAL_ERROR_MESSAGE = "服务内部错误，请稍后重试。"


async def _send_event(websocket: WebSocket, event: RelayEvent) -> None:
    await websocket.send_text(event.model_dump_json())


async def _run_turn(
    websocket: WebSocket,
    controller: RelayController,
    session_id: str,
    request: ChatRequest,
) -> None:
    try:
        async with aclosing(controller.session_turn(session_id, request)) as events:
            async for event in events:
                await _send_event(websocket, event)
    except WebSocketDisconnect:
        logger.info("Client left mid-turn: %s", session_id)
    except Exception:
        logger.exception("Turn failed on session %s", session_id)
        # The socket may already be closed; nothing else to report to then.
        with suppress(WebSocketDisconnect, RuntimeError):
            await _send_event(websocket, RelayEvent.error(INTERNAL_ERROR_MESSAGE))


@router.websocket("/ws")
async def chat_socket(websocket: WebSocket, controller: RelayController = Depends(get_controller)) -> None:
    # 1) Open: create the session + accept
    # 2) Loop: parse frame -> run the turn as a task so close is noticed mid-stream
    # 3) Close: cancel the in-flight turn (aborts upstream) + destroy the session
    session_id = str(uuid.uuid4())
    controller.open_session(session_id)
    turn: Optional[asyncio.Task] = None

    try:
        await websocket.accept()
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            # Binary frames are decoded and treated like text.
            raw = message.get("text")
            request = controller.parse_inbound(raw if raw is not None else message.get("bytes"))

            if turn is not None and not turn.done():
                logger.info("Busy session %s: rejecting new message", session_id)
                await _send_event(websocket, RelayEvent.error(BUSY_MESSAGE))
                continue

            turn = asyncio.create_task(_run_turn(websocket, controller, session_id, request))
    except WebSocketDisconnect:
        logger.info("WebSocket disconnected: %s", session_id)
    finally:
        if turn is not None and not turn.done():
            turn.cancel()
            with suppress(asyncio.CancelledError, WebSocketDisconnect, RuntimeError):
                await turn
        controller.close_session(session_id)

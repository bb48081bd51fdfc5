# expo_agent/core/flow_controller.py
# Role: Orchestrator for one conversation turn, for both transports. It glues together:
# inbound parsing, turn preparation (intent + steering), session bookkeeping, and upstream streaming,
# and turns the result into RelayEvents. Transports only serialize and send those events.

from __future__ import annotations

import json
import logging
from typing import AsyncIterator, Optional

from expo_agent.core.prompt_augmenter import PromptAugmenter
from expo_agent.core.session_store import SessionBusyError, SessionStore
from expo_agent.llm.completion_client import CompletionClient, CompletionError
from expo_agent.models.events import ChatRequest, RelayEvent
from expo_agent.models.message import Message
from expo_agent.prompts.system_prompt import build_system_prompt

logger = logging.getLogger("expo_agent.relay")

THINKING_MESSAGE = "正在思考中…"
BUSY_MESSAGE = "上一条回复尚未完成，请稍候再发送。"
MISSING_KEY_ERROR = "未配置通义密钥"


def parse_inbound(raw: object) -> ChatRequest:
    """
    Parse a raw inbound frame into a ChatRequest.

    A JSON object supplies `text` and optionally `key`. Anything else (invalid
    JSON, a JSON string/number/list, binary data) is used verbatim as the text.
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    raw_text = "" if raw is None else str(raw)

    try:
        payload = json.loads(raw_text)
    except json.JSONDecodeError:
        return ChatRequest(text=raw_text)

    # A bare JSON scalar or list keeps its raw text rather than becoming an empty message.
    if not isinstance(payload, dict):
        return ChatRequest(text=raw_text)
    return ChatRequest(text=payload.get("text"), key=payload.get("key"))


class RelayController:
    def __init__(
        self,
        sessions: Optional[SessionStore] = None,
        completion_client: Optional[CompletionClient] = None,
        augmenter: Optional[PromptAugmenter] = None,
    ) -> None:
        # Key line: dependencies are injectable for testing/mocking.
        self.sessions = sessions or SessionStore()
        self.completion_client = completion_client or CompletionClient()
        self.augmenter = augmenter or PromptAugmenter()

    parse_inbound = staticmethod(parse_inbound)

    def open_session(self, session_id: str) -> None:
        self.sessions.create(session_id)
        logger.info("Session opened: %s (active=%d)", session_id, len(self.sessions))

    def close_session(self, session_id: str) -> None:
        self.sessions.destroy(session_id)
        logger.info("Session closed: %s (active=%d)", session_id, len(self.sessions))

    def is_busy(self, session_id: str) -> bool:
        return self.sessions.is_busy(session_id)

    async def session_turn(self, session_id: str, request: ChatRequest) -> AsyncIterator[RelayEvent]:
        # 1) Claim the single in-flight slot (reject if a reply is still streaming)
        # 2) Append user message + steering instruction
        # 3) Stream deltas, then record the reply, truncate, emit final
        # 4) On upstream failure: roll back this turn and emit one error event
        try:
            self.sessions.begin_turn(session_id)
        except SessionBusyError:
            logger.info("Rejected message on busy session %s", session_id)
            yield RelayEvent.error(BUSY_MESSAGE)
            return

        completed = False
        stream = None
        try:
            start_length = len(self.sessions.get(session_id).transcript)
            plan = self.augmenter.prepare(request.text)
            for message in plan.messages():
                self.sessions.append(session_id, message)
            logger.info("Turn started: session=%s intent=%s", session_id, plan.intent.value)

            yield RelayEvent.status(THINKING_MESSAGE)

            stream = self.completion_client.stream_complete(
                self.sessions.transcript(session_id), api_key=request.key
            )
            try:
                async for fragment in stream:
                    logger.debug("delta session=%s %r", session_id, fragment)
                    yield RelayEvent.delta(fragment)
            except CompletionError as e:
                logger.warning("Upstream failure on session %s: %s", session_id, e)
                self.sessions.rollback(session_id, start_length)
                yield RelayEvent.error(str(e))
                return

            reply = stream.text
            self.sessions.append(session_id, Message(role="assistant", content=reply))
            self.sessions.truncate(session_id)
            completed = True
            logger.info("Turn finished: session=%s reply_chars=%d", session_id, len(reply))

            yield RelayEvent.final(reply)
        finally:
            if stream is not None and not stream.finished:
                await stream.aclose()
            self.sessions.end_turn(session_id, completed=completed)

    async def one_shot(self, request: ChatRequest) -> AsyncIterator[RelayEvent]:
        # Stateless: a fresh [system, user, instruction] transcript per call.
        plan = self.augmenter.prepare(request.text)
        transcript = [Message(role="system", content=build_system_prompt()), *plan.messages()]

        # Key line: here a missing credential ends the exchange instead of producing a simulated reply.
        if not self.completion_client.has_credential(request.key):
            logger.warning("One-shot request without an upstream API key")
            yield RelayEvent.error(MISSING_KEY_ERROR)
            return

        logger.info("One-shot started: intent=%s", plan.intent.value)
        stream = self.completion_client.stream_complete(transcript, api_key=request.key)
        try:
            async for fragment in stream:
                yield RelayEvent.delta(fragment)
        except CompletionError as e:
            logger.warning("Upstream failure on one-shot request: %s", e)
            yield RelayEvent.error(str(e))
            return
        finally:
            if not stream.finished:
                await stream.aclose()

        yield RelayEvent.final(stream.text)

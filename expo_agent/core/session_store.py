# Role: In-memory session registry for the WebSocket transport. Owns the lifecycle of Session
# objects: create on open, append per turn, bounded truncation after each completed turn, destroy on close.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from expo_agent.models.message import Message
from expo_agent.models.session import Session
from expo_agent.prompts.system_prompt import build_system_prompt


class SessionNotFoundError(KeyError):
    pass


class SessionBusyError(RuntimeError):
    pass


class SessionStore:
    def __init__(
        self,
        max_messages: int = 20,
        keep_recent: int = 18,
        system_prompt: Optional[str] = None,
    ) -> None:
        if keep_recent >= max_messages:
            raise ValueError("keep_recent must be smaller than max_messages")
        self._sessions: Dict[str, Session] = {}
        self._max_messages = max_messages
        self._keep_recent = keep_recent
        self._system_prompt = system_prompt or build_system_prompt()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def session_ids(self) -> List[str]:
        return list(self._sessions)

    def create(self, session_id: str) -> Session:
        # Key line: every transcript starts with exactly one system message.
        session = Session(
            session_id=session_id,
            transcript=[Message(role="system", content=self._system_prompt)],
        )
        self._sessions[session_id] = session
        return session

    def get(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def transcript(self, session_id: str) -> List[Message]:
        return list(self.get(session_id).transcript)

    def append(self, session_id: str, message: Message) -> Session:
        if message.role == "system":
            raise ValueError("system message is fixed at index 0")
        session = self.get(session_id)
        session.transcript.append(message)
        session.updated_at = datetime.now(timezone.utc)
        return session

    def truncate(self, session_id: str) -> Session:
        # 1) Only when the transcript grew past the limit
        # 2) Keep the system message plus the most recent messages
        session = self.get(session_id)
        history = session.transcript
        if len(history) > self._max_messages:
            session.transcript = [history[0], *history[-self._keep_recent :]]
        return session

    def rollback(self, session_id: str, length: int) -> Session:
        # Role: drop everything a failed turn appended; the system message always survives.
        session = self.get(session_id)
        session.transcript = session.transcript[: max(length, 1)]
        session.updated_at = datetime.now(timezone.utc)
        return session

    def is_busy(self, session_id: str) -> bool:
        return self.get(session_id).in_flight

    def begin_turn(self, session_id: str) -> Session:
        session = self.get(session_id)
        if session.in_flight:
            raise SessionBusyError(session_id)
        session.in_flight = True
        return session

    def end_turn(self, session_id: str, completed: bool = True) -> None:
        # Key line: the session may already be gone if the connection closed mid-turn.
        session = self._sessions.get(session_id)
        if session is None:
            return
        session.in_flight = False
        if completed:
            session.turn_count += 1
        session.updated_at = datetime.now(timezone.utc)

    def destroy(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

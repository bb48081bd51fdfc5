# Role: Local developer CLI to chat with the relay in-process, without a server or browser.
# Deltas are printed as they stream, which makes intent/steering behaviour easy to eyeball.

from __future__ import annotations
import asyncio
import uuid

import expo_agent.config
expo_agent.config.load_env()

from expo_agent.core.flow_controller import RelayController
from expo_agent.models.events import ChatRequest


def _new_session_id() -> str:
    return str(uuid.uuid4())


async def _print_turn(relay: RelayController, session_id: str, text: str) -> None:
    print("\nAssistant: ", end="", flush=True)
    async for event in relay.session_turn(session_id, ChatRequest(text=text)):
        if event.type == "delta":
            print(event.content, end="", flush=True)
        elif event.type == "error":
            print(f"[error] {event.content}", end="")
    print()


def main() -> None:
    # 1) Create RelayController + a local session
    # 2) Route user input -> session_turn -> print streamed output
    # 3) /new drops the session and starts a fresh transcript
    print("Expo Chat Agent CLI")
    print("Commands: /new (new session), /session (show session_id), /exit")
    print("-" * 50)

    relay = RelayController()
    session_id = _new_session_id()
    relay.open_session(session_id)
    print(f"session_id: {session_id}")

    while True:
        try:
            user_message = input("\nYou: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_message:
            continue

        cmd = user_message.lower()

        if cmd in {"/exit", "exit", "quit", "/quit"}:
            print("Bye!")
            return

        if cmd in {"/new", "new"}:
            relay.close_session(session_id)
            session_id = _new_session_id()
            relay.open_session(session_id)
            print(f"New session_id: {session_id}")
            continue

        if cmd in {"/session", "session"}:
            print(f"session_id: {session_id}")
            continue

        asyncio.run(_print_turn(relay, session_id, user_message))


if __name__ == "__main__":
    main()

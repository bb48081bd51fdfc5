# Role: Process-wide wiring of the relay. One SessionStore + CompletionClient + RelayController,
# handed to routes through FastAPI dependencies so tests can override them.

from __future__ import annotations

from typing import Optional

from expo_agent.core.flow_controller import RelayController

_controller: Optional[RelayController] = None


def get_controller() -> RelayController:
    # Built lazily so config.load_env() has already run when the client reads its settings.
    global _controller
    if _controller is None:
        _controller = RelayController()
    return _controller

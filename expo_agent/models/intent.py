# Role: Coarse request shape used to pick the steering instruction appended to each turn.
# Recomputed for every incoming message, never stored.

from enum import Enum


class Intent(str, Enum):
    PLAN = "plan"
    INFO = "info"
    AUTO = "auto"

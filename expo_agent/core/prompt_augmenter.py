# Role: Chooses the steering instruction for a turn and packages the turn's user-side messages.
# Shared by both transports so classification + augmentation behave identically everywhere.

from __future__ import annotations

import re
from typing import Optional

from expo_agent.core.intent_classifier import IntentClassifier
from expo_agent.models.intent import Intent
from expo_agent.models.message import Message
from expo_agent.models.turn import TurnPlan
from expo_agent.prompts.steering_prompt import (
    build_natural_instruction,
    build_plan_instruction,
    build_table_instruction,
)

_TABLE_PATTERN = re.compile(r"表格|清单|列表|excel|csv|结构化|整理成表格|导出", re.IGNORECASE)


def wants_table(text: Optional[str]) -> bool:
    return bool(_TABLE_PATTERN.search(text or ""))


class PromptAugmenter:
    def __init__(self, classifier: Optional[IntentClassifier] = None) -> None:
        self.classifier = classifier or IntentClassifier()

    def augment(self, intent: Intent, text: Optional[str]) -> str:
        # 1) plan -> full planning document
        # 2) asked for a table/list/export -> Markdown table with fixed columns
        # 3) otherwise -> natural language only
        if intent == Intent.PLAN:
            return build_plan_instruction()
        if wants_table(text):
            return build_table_instruction()
        return build_natural_instruction()

    def prepare(self, text: Optional[str]) -> TurnPlan:
        text = text or ""
        intent = self.classifier.classify(text)
        return TurnPlan(
            intent=intent,
            user_message=Message(role="user", content=text),
            instruction=Message(role="user", content=self.augment(intent, text)),
        )

# Role: Keyword heuristic that maps raw user text to an Intent (plan / info / auto).
# Pure and total: every string, including empty, maps to exactly one Intent.

from __future__ import annotations

import re
from typing import Optional

from expo_agent.models.intent import Intent

PLAN_KEYWORDS = ("方案", "筹备", "规划", "计划", "举办", "办一个", "开一个", "策划")
INFO_KEYWORDS = ("有哪些", "有什么展", "展会信息", "时间", "地点", "官网", "主办", "参展")

EXHIBITION_TOKEN = "展"
QUERY_TOKEN = "查询"

_EVENT_PATTERN = re.compile(r"展会|博览会|大会")


class IntentClassifier:
    """
    Heuristic intent classification.

    Contract:
    - plan: a planning keyword plus the exhibition token, unless the user says "查询".
    - info: an information keyword or an exhibition/expo/conference mention, and not plan.
    - auto: everything else.
    Plan wins whenever both heuristics fire.
    """

    def classify(self, text: Optional[str]) -> Intent:
        t = (text or "").lower()

        is_plan = self._looks_like_plan(t)
        is_info = self._looks_like_info(t)

        if is_plan and QUERY_TOKEN not in t:
            return Intent.PLAN
        if is_info and not is_plan:
            return Intent.INFO
        return Intent.AUTO

    def _looks_like_plan(self, t: str) -> bool:
        return any(k in t for k in PLAN_KEYWORDS) and EXHIBITION_TOKEN in t

    def _looks_like_info(self, t: str) -> bool:
        return any(k in t for k in INFO_KEYWORDS) or bool(_EVENT_PATTERN.search(t))

# Role: Per-turn steering instructions. One of these is pushed as an extra user message right
# after the real query; PromptAugmenter decides which.

from __future__ import annotations

# Columns of the Markdown table requested when the user asks for tabular output.
TABLE_COLUMNS = ("名称", "时间", "城市", "地点", "主办", "官网", "简介")

# Sections the planning document must cover, in order.
PLAN_SECTIONS = (
    "目标与定位",
    "主题与受众",
    "时间与规模",
    "预算拆分",
    "场地与动线",
    "展商与赞助",
    "内容策划（日程/舞台/嘉宾）",
    "票务与权益",
    "宣发渠道与节奏",
    "人员组织与SOP",
    "风险与预案",
    "里程碑时间表（倒排）",
)


def build_plan_instruction() -> str:
    return (
        "当前意图是“筹办动漫展会的可执行方案”。请以自然语言输出，包含："
        + "、".join(PLAN_SECTIONS)
        + "。如需再细化，可在结尾给出3条高价值下一步建议。"
    )


def build_table_instruction() -> str:
    return (
        "请用中文自然说明，并给出一个Markdown表格，不要JSON。表格列："
        + "|".join(TABLE_COLUMNS)
        + "。若信息不全，请在表格后给出建议与下一步。"
    )


def build_natural_instruction() -> str:
    return "请以中文自然说明为主，不要输出JSON或表格；必要时可在文案中附上官网链接。"

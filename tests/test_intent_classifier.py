import pytest

from expo_agent.core.intent_classifier import IntentClassifier
from expo_agent.models.intent import Intent

classifier = IntentClassifier()


def test_planning_an_exhibition_is_plan():
    assert classifier.classify("我想策划一个动漫展") == Intent.PLAN


def test_listing_exhibitions_is_info():
    assert classifier.classify("有哪些展会") == Intent.INFO


def test_plan_wins_over_info_keywords():
    # "时间", "地点" and "展会" would all make it info on their own.
    assert classifier.classify("帮我规划一个展会，时间和地点待定") == Intent.PLAN


def test_query_keyword_blocks_plan_and_info():
    # plan heuristic fires, so the info branch is skipped as well.
    assert classifier.classify("查询一下举办动漫展的方案") == Intent.AUTO


def test_plan_keyword_without_exhibition_token():
    assert classifier.classify("帮我做个旅行计划") == Intent.AUTO


@pytest.mark.parametrize("text", ["上海车展官网是什么", "今年的博览会", "开发者大会什么时候"])
def test_info_keywords_and_event_pattern(text):
    assert classifier.classify(text) == Intent.INFO


def test_matching_is_case_insensitive_and_total():
    assert classifier.classify("") == Intent.AUTO
    assert classifier.classify(None) == Intent.AUTO
    assert classifier.classify("Hello THERE") == Intent.AUTO


def test_classification_is_deterministic():
    samples = ["我想策划一个动漫展", "有哪些展会", "你好", "查询展会"]
    first = [classifier.classify(s) for s in samples]
    second = [IntentClassifier().classify(s) for s in samples]
    assert first == second

import pytest
from pydantic import ValidationError

from expo_agent.core.session_store import SessionBusyError, SessionNotFoundError, SessionStore
from expo_agent.models.message import Message
from expo_agent.prompts.system_prompt import build_system_prompt


def _user(n: int) -> Message:
    return Message(role="user", content=f"m{n}")


def test_create_seeds_single_system_message():
    store = SessionStore()
    session = store.create("a")
    assert [m.role for m in session.transcript] == ["system"]
    assert session.transcript[0].content == build_system_prompt()
    assert "a" in store and len(store) == 1


def test_unknown_session_raises():
    store = SessionStore()
    with pytest.raises(SessionNotFoundError):
        store.get("nope")
    with pytest.raises(KeyError):
        store.append("nope", _user(1))


def test_append_preserves_order_and_rejects_system():
    store = SessionStore()
    store.create("a")
    for i in range(3):
        store.append("a", _user(i))
    assert [m.content for m in store.transcript("a")[1:]] == ["m0", "m1", "m2"]
    with pytest.raises(ValueError):
        store.append("a", Message(role="system", content="again"))


def test_truncate_keeps_system_plus_last_18():
    store = SessionStore()
    store.create("a")
    system = store.get("a").transcript[0]
    for i in range(19):
        store.append("a", _user(i))
    assert len(store.truncate("a").transcript) == 20  # not over the limit yet

    store.append("a", _user(19))
    store.append("a", _user(20))
    transcript = store.truncate("a").transcript
    assert len(transcript) == 19
    assert transcript[0] is system
    assert [m.content for m in transcript[1:]] == [f"m{i}" for i in range(3, 21)]


def test_rollback_never_drops_system_message():
    store = SessionStore()
    store.create("a")
    store.append("a", _user(1))
    store.append("a", _user(2))
    assert len(store.rollback("a", 2).transcript) == 2
    assert [m.role for m in store.rollback("a", 0).transcript] == ["system"]


def test_single_slot_in_flight_flag():
    store = SessionStore()
    store.create("a")
    store.begin_turn("a")
    assert store.is_busy("a")
    with pytest.raises(SessionBusyError):
        store.begin_turn("a")
    store.end_turn("a")
    assert not store.is_busy("a")
    assert store.get("a").turn_count == 1

    store.begin_turn("a")
    store.end_turn("a", completed=False)
    assert store.get("a").turn_count == 1


def test_destroy_drops_state_and_tolerates_unknown_ids():
    store = SessionStore()
    store.create("a")
    store.create("b")
    store.destroy("a")
    store.destroy("missing")
    store.end_turn("a")
    assert store.session_ids() == ["b"]


def test_sessions_are_isolated():
    store = SessionStore()
    store.create("a")
    store.create("b")
    store.append("a", _user(1))
    assert len(store.transcript("b")) == 1


def test_messages_are_immutable():
    msg = _user(1)
    with pytest.raises(ValidationError):
        msg.content = "changed"
    assert msg.to_api() == {"role": "user", "content": "m1"}


def test_thresholds_must_leave_room_for_truncation():
    with pytest.raises(ValueError):
        SessionStore(max_messages=10, keep_recent=10)

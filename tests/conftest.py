from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import List, Optional, Sequence

import pytest

import expo_agent.config as config
from expo_agent.core.flow_controller import RelayController
from expo_agent.core.session_store import SessionStore
from expo_agent.llm.completion_client import CompletionClient


def text_chunk(content: Optional[str]) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


def usage_chunk() -> SimpleNamespace:
    return SimpleNamespace(choices=[], usage=SimpleNamespace(total_tokens=42))


class FakeStream:
    def __init__(self, chunks: Sequence[SimpleNamespace], error: Optional[Exception], delay: float) -> None:
        self._chunks = list(chunks)
        self._error = error
        self._delay = delay
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self._chunks:
            if self._delay:
                await asyncio.sleep(self._delay)
            yield chunk
        if self._error is not None:
            raise self._error

    async def close(self) -> None:
        self.closed = True


class FakeOpenAI:
    """Stands in for AsyncOpenAI; also acts as the client_factory (called with the API key)."""

    def __init__(
        self,
        fragments: Sequence[Optional[str]] = (),
        stream_error: Optional[Exception] = None,
        create_error: Optional[Exception] = None,
        delay: float = 0.0,
    ) -> None:
        self.fragments = list(fragments)
        self.stream_error = stream_error
        self.create_error = create_error
        self.delay = delay
        self.keys: List[str] = []
        self.requests: List[dict] = []
        self.streams: List[FakeStream] = []
        self.close_count = 0
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def __call__(self, api_key: str) -> "FakeOpenAI":
        self.keys.append(api_key)
        return self

    async def _create(self, **kwargs) -> FakeStream:
        self.requests.append(kwargs)
        if self.create_error is not None:
            raise self.create_error
        chunks = [text_chunk(f) for f in self.fragments] + [usage_chunk()]
        stream = FakeStream(chunks, self.stream_error, self.delay)
        self.streams.append(stream)
        return stream

    async def close(self) -> None:
        self.close_count += 1


@pytest.fixture
def no_default_key(monkeypatch):
    monkeypatch.setattr(config, "DASHSCOPE_API_KEY", None)


@pytest.fixture
def fake_openai() -> FakeOpenAI:
    return FakeOpenAI(fragments=["你好", "，", None, "这是", "回复。 "])


@pytest.fixture
def completion_client(fake_openai: FakeOpenAI) -> CompletionClient:
    return CompletionClient(api_key="test-key", model="qwen-test", client_factory=fake_openai)


@pytest.fixture
def controller(completion_client: CompletionClient) -> RelayController:
    return RelayController(sessions=SessionStore(), completion_client=completion_client)

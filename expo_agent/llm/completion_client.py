# Role: Thin async wrapper around the OpenAI-compatible chat-completions API (DashScope / Tongyi by default).
# Centralizes credential resolution, model name, timeout and error wrapping, so callers only see
# a CompletionStream: an async sequence of text fragments plus the final concatenated reply.

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Callable, List, Optional, Sequence

import httpx
import openai
from openai import AsyncOpenAI

import expo_agent.config as config
from expo_agent.models.message import Message

logger = logging.getLogger("expo_agent.llm")

MISSING_KEY_MESSAGE = "❌ 未配置通义 API Key，请设置环境变量 DASHSCOPE_API_KEY。"


class CompletionError(RuntimeError):
    pass


class CompletionStream:
    """
    Async iterator over non-empty reply fragments, in arrival order.

    Once the iterator is exhausted, `text` holds the stripped concatenation of
    every fragment. Upstream failures surface as CompletionError from the
    iteration itself; `aclose()` aborts the underlying request.
    """

    def __init__(self, source: AsyncIterator[str]) -> None:
        self._source = source
        self._fragments: List[str] = []
        self._finished = False

    def __aiter__(self) -> "CompletionStream":
        return self

    async def __anext__(self) -> str:
        try:
            fragment = await self._source.__anext__()
        except StopAsyncIteration:
            self._finished = True
            raise
        self._fragments.append(fragment)
        return fragment

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def text(self) -> str:
        if not self._finished:
            raise RuntimeError("Completion stream has not finished yet.")
        return "".join(self._fragments).strip()

    async def aclose(self) -> None:
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()


def _chunk_text(chunk: Any) -> str:
    # Usage-only chunks (stream_options.include_usage) carry no choices.
    choices = getattr(chunk, "choices", None) or []
    if not choices:
        return ""
    delta = getattr(choices[0], "delta", None)
    return getattr(delta, "content", None) or ""


class CompletionClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client_factory: Optional[Callable[[str], Any]] = None,
    ) -> None:
        # Key lines:
        # - Default key/model come from config; callers may override the key per request.
        # - client_factory lets tests swap the SDK client without touching the network.
        self.api_key = api_key or config.DASHSCOPE_API_KEY
        self.model_name = model or config.TONGYI_MODEL
        self.base_url = base_url or config.DASHSCOPE_BASE_URL
        self.timeout = timeout if timeout is not None else config.LLM_TIMEOUT_SECONDS
        self._client_factory = client_factory or self._build_client

    def _build_client(self, api_key: str) -> AsyncOpenAI:
        # No retries: a single upstream failure ends the turn.
        return AsyncOpenAI(
            api_key=api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
        )

    def resolve_key(self, key_override: Optional[str] = None) -> Optional[str]:
        return key_override or self.api_key

    def has_credential(self, key_override: Optional[str] = None) -> bool:
        return bool(self.resolve_key(key_override))

    def stream_complete(
        self,
        messages: Sequence[Message],
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ) -> CompletionStream:
        key = self.resolve_key(api_key)
        if not key:
            logger.warning("No upstream API key configured; replying with a configuration notice.")
            return CompletionStream(self._missing_key())

        payload = [m.to_api() for m in messages]
        return CompletionStream(self._iter_upstream(payload, key, model or self.model_name))

    async def _missing_key(self) -> AsyncIterator[str]:
        yield MISSING_KEY_MESSAGE

    async def _iter_upstream(self, payload: List[dict], key: str, model: str) -> AsyncIterator[str]:
        # 1) Open one streaming completion request
        # 2) Yield every non-empty delta in order
        # 3) Always release the response and the HTTP client (also on cancellation)
        client = self._client_factory(key)
        stream = None
        try:
            try:
                stream = await client.chat.completions.create(
                    model=model,
                    messages=payload,
                    stream=True,
                    stream_options={"include_usage": True},
                )
                logger.debug("Upstream stream opened: model=%s messages=%d", model, len(payload))
                async for chunk in stream:
                    delta = _chunk_text(chunk)
                    if delta:
                        yield delta
            except (openai.OpenAIError, httpx.HTTPError) as e:
                raise CompletionError(f"Upstream completion failed: {e}") from e
            except Exception as e:
                # e.g. a malformed upstream event failing to decode inside the SDK stream.
                raise CompletionError(f"Upstream completion failed: {type(e).__name__}: {e}") from e
        finally:
            if stream is not None:
                await stream.close()
            await client.close()

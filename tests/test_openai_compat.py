"""Coverage for the OpenAI-compatible streaming client using a fake SDK."""

from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, Iterable, List, Optional

import httpx
import openai
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from local_ai_chat.llm import CompletionError, ModelNotFoundError, OpenAICompatClient
from local_ai_chat.llm.openai_compat import translate_error

BASE_URL = "http://localhost:11434/v1"
REQUEST = httpx.Request("POST", f"{BASE_URL}/chat/completions")


def _chunk(content: Optional[str]) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


class _FakeStream:
    """Iterable standing in for ``openai.Stream`` with a close() hook."""

    def __init__(self, chunks: Iterable[Any], error: Optional[BaseException] = None) -> None:
        self._chunks = list(chunks)
        self._error = error
        self.closed = False

    def __iter__(self):
        yield from self._chunks
        if self._error is not None:
            raise self._error

    def close(self) -> None:
        self.closed = True


class _FakeSDK:
    """Mimics ``OpenAI().chat.completions.create`` and records its kwargs."""

    def __init__(self, stream: Optional[_FakeStream] = None, error: Optional[BaseException] = None) -> None:
        self.stream = stream
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs: Any) -> _FakeStream:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        assert self.stream is not None
        return self.stream


def _client(sdk: _FakeSDK) -> OpenAICompatClient:
    return OpenAICompatClient(base_url=BASE_URL + "/", api_key="ollama", client=sdk)  # type: ignore[arg-type]


MESSAGES = [
    {"role": "system", "content": "You are a helpful, clear and concise assistant."},
    {"role": "user", "content": "hello"},
]


def test_stream_yields_fragments_and_sends_fixed_payload() -> None:
    stream = _FakeStream([_chunk("Hi"), _chunk(None), _chunk(""), _chunk(" there"), _chunk("!")])
    sdk = _FakeSDK(stream)
    client = _client(sdk)

    pieces = list(client.stream_chat(MESSAGES, model="gemma3", temperature=0.2))

    assert pieces == ["Hi", " there", "!"]
    assert stream.closed
    assert client.base_url == BASE_URL
    call = sdk.calls[0]
    assert call == {
        "model": "gemma3",
        "messages": MESSAGES,
        "temperature": 0.2,
        "max_tokens": 4096,
        "stream": True,
    }


def test_chunks_without_choices_are_skipped() -> None:
    stream = _FakeStream([SimpleNamespace(choices=[]), _chunk("ok")])
    client = _client(_FakeSDK(stream))
    assert client.complete(MESSAGES, model="gemma3", temperature=0.7) == "ok"


def test_connection_refused_becomes_completion_error() -> None:
    sdk = _FakeSDK(error=openai.APIConnectionError(request=REQUEST))
    client = _client(sdk)
    with pytest.raises(CompletionError) as excinfo:
        list(client.stream_chat(MESSAGES, model="gemma3", temperature=0.7))
    assert not isinstance(excinfo.value, ModelNotFoundError)
    assert "Cannot reach the model server" in str(excinfo.value)


def test_not_found_status_becomes_model_not_found() -> None:
    response = httpx.Response(404, request=REQUEST)
    error = openai.NotFoundError("model \"gemma9\" not found, try pulling it first", response=response, body=None)
    client = _client(_FakeSDK(error=error))
    with pytest.raises(ModelNotFoundError) as excinfo:
        list(client.stream_chat(MESSAGES, model="gemma9", temperature=0.7))
    assert excinfo.value.model == "gemma9"
    assert "not found" in str(excinfo.value)


def test_server_error_keeps_status_in_message() -> None:
    response = httpx.Response(500, request=REQUEST)
    error = openai.InternalServerError("boom", response=response, body=None)
    translated = translate_error(error, "gemma3")
    assert type(translated) is CompletionError
    assert str(translated) == "HTTP 500: boom"


def test_broken_stream_is_wrapped_and_closed() -> None:
    stream = _FakeStream([_chunk("par"), _chunk("tial")], error=httpx.ReadError("connection reset", request=REQUEST))
    client = _client(_FakeSDK(stream))
    received: List[str] = []
    with pytest.raises(CompletionError) as excinfo:
        for piece in client.stream_chat(MESSAGES, model="gemma3", temperature=0.7):
            received.append(piece)
    assert received == ["par", "tial"]
    assert "connection reset" in str(excinfo.value)
    assert stream.closed


def test_malformed_event_in_stream_is_wrapped() -> None:
    stream = _FakeStream([_chunk("x")], error=openai.APIError("bad event", REQUEST, body=None))
    client = _client(_FakeSDK(stream))
    with pytest.raises(CompletionError, match="bad event"):
        list(client.stream_chat(MESSAGES, model="gemma3", temperature=0.7))


def test_closing_generator_early_closes_sdk_stream() -> None:
    stream = _FakeStream([_chunk("a"), _chunk("b"), _chunk("c")])
    client = _client(_FakeSDK(stream))
    iterator = client.stream_chat(MESSAGES, model="gemma3", temperature=0.7)
    assert next(iterator) == "a"
    iterator.close()
    assert stream.closed

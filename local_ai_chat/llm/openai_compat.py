"""Streaming chat client for OpenAI-compatible servers using the official SDK."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, Iterator, Optional

import httpx
import openai
from openai import OpenAI

from ..config import MAX_TOKENS
from .base import BaseChatClient, CompletionError, ModelNotFoundError

_MODEL_MISSING_RE = re.compile(r"model\s+['\"]?([^'\"\s]+)['\"]?\s+not found", re.IGNORECASE)

log = logging.getLogger(__name__)


def _error_text(exc: BaseException) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__


def translate_error(exc: openai.APIError, model: str) -> CompletionError:
    """Map an SDK exception onto the client's error types."""

    message = _error_text(exc)
    missing = _MODEL_MISSING_RE.search(message)
    if missing:
        return ModelNotFoundError(missing.group(1), message)
    if isinstance(exc, openai.NotFoundError):
        return ModelNotFoundError(model, message)
    if isinstance(exc, openai.APIConnectionError):
        return CompletionError(f"Cannot reach the model server: {message}")
    if isinstance(exc, openai.APIStatusError):
        return CompletionError(f"HTTP {exc.status_code}: {message}")
    return CompletionError(message)


class OpenAICompatClient(BaseChatClient):
    """Client that streams chat completions through the OpenAI SDK."""

    name = "openai-compatible"

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        client: Optional[OpenAI] = None,
    ) -> None:
        super().__init__(base_url=base_url, api_key=api_key)
        # Local servers ignore the key, but the SDK refuses to start without one.
        self._client = client or OpenAI(base_url=self.base_url, api_key=self.api_key or "ollama")

    def stream_chat(
        self,
        messages: Iterable[Dict[str, Any]],
        *,
        model: str,
        temperature: float,
        max_tokens: int = MAX_TOKENS,
    ) -> Iterator[str]:
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": self._format_messages(messages),
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": True,
        }
        log.debug(
            "POST %s/chat/completions model=%s messages=%d temperature=%s",
            self.base_url,
            model,
            len(kwargs["messages"]),
            temperature,
        )
        try:
            stream = self._client.chat.completions.create(**kwargs)
        except openai.APIError as exc:
            log.debug("Completion request failed: %s", exc)
            raise translate_error(exc, model) from exc

        try:
            for chunk in stream:
                choice = (getattr(chunk, "choices", None) or [None])[0]
                delta = getattr(choice, "delta", None)
                content = getattr(delta, "content", None)
                if content:
                    yield content
        except openai.APIError as exc:
            log.debug("Stream failed mid-response: %s", exc)
            raise translate_error(exc, model) from exc
        except (httpx.HTTPError, ValueError) as exc:
            log.debug("Stream failed mid-response: %s", exc)
            raise CompletionError(f"Response stream broke off: {_error_text(exc)}") from exc
        finally:
            close = getattr(stream, "close", None)
            if callable(close):
                close()


__all__ = ["OpenAICompatClient", "translate_error"]

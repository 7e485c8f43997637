"""Base classes shared by completion backends."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Optional

from ..config import MAX_TOKENS


class CompletionError(RuntimeError):
    """A completion request failed; the message is safe to show the user."""


class ModelNotFoundError(CompletionError):
    """The server does not know the requested model."""

    def __init__(self, model: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"model '{model}' not found")
        self.model = model


class BaseChatClient:
    """Common interface for streaming chat backends."""

    name: str = "client"

    def __init__(self, *, base_url: str, api_key: Optional[str] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    def stream_chat(
        self,
        messages: Iterable[Dict[str, Any]],
        *,
        model: str,
        temperature: float,
        max_tokens: int = MAX_TOKENS,
    ) -> Iterator[str]:
        """Yield response text fragments as they arrive.

        Exhausting the iterator means the response is complete. Failures are
        raised as :class:`CompletionError` from the point of iteration.
        """

        raise NotImplementedError

    def complete(
        self,
        messages: Iterable[Dict[str, Any]],
        *,
        model: str,
        temperature: float,
        max_tokens: int = MAX_TOKENS,
    ) -> str:
        return "".join(self.stream_chat(messages, model=model, temperature=temperature, max_tokens=max_tokens))

    # Utility routines ----------------------------------------------------
    @staticmethod
    def _format_messages(messages: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
        return [
            {"role": str(message.get("role", "user")), "content": str(message.get("content") or "")}
            for message in messages
        ]


__all__ = ["BaseChatClient", "CompletionError", "ModelNotFoundError"]

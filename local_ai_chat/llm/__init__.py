"""Completion backends for the chat loop."""

from __future__ import annotations

from .base import BaseChatClient, CompletionError, ModelNotFoundError
from .openai_compat import OpenAICompatClient


def build_client(*, base_url: str, api_key: str) -> BaseChatClient:
    """Return the client used for OpenAI-compatible local servers."""

    return OpenAICompatClient(base_url=base_url, api_key=api_key)


__all__ = [
    "BaseChatClient",
    "CompletionError",
    "ModelNotFoundError",
    "OpenAICompatClient",
    "build_client",
]

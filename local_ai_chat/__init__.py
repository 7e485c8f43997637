"""Terminal chat client for local OpenAI-compatible LLM servers."""

from __future__ import annotations

from .app import main as chat_main
from .multitool import main as multitool_main
from .version import __version__

__all__ = [
    "main",
    "chat_main",
    "__version__",
]

main = multitool_main

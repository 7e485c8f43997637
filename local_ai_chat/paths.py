"""Shared path utilities for conversation storage and configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional


def _env_path(name: str) -> Optional[Path]:
    value = os.getenv(name)
    if not value:
        return None
    return Path(value).expanduser()


def chat_home() -> Path:
    """Return the per-user directory holding saved conversations."""

    override = _env_path("LOCAL_AI_CHAT_HOME")
    if override:
        return override
    return Path.home() / ".local-ai-chat"


def ensure_chat_home(root: Optional[Path] = None) -> Path:
    """Create the storage directory if needed and return it."""

    target = root or chat_home()
    target.mkdir(parents=True, exist_ok=True)
    return target


def config_file(root: Optional[Path] = None) -> Path:
    """Return the optional ``KEY=VALUE`` settings file inside the chat home."""

    return (root or chat_home()) / "config.env"


__all__ = ["chat_home", "ensure_chat_home", "config_file"]

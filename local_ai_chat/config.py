"""Runtime configuration for the chat client.

Values resolve in this order: explicit CLI flag, process environment, the
optional ``config.env`` file in the chat home directory, then the defaults
below.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .paths import chat_home, config_file

DEFAULT_MODEL = "gemma3"
DEFAULT_BASE_URL = "http://localhost:11434/v1"
DEFAULT_API_KEY = "ollama"
DEFAULT_TEMPERATURE = 0.7
MAX_HISTORY = 30
MAX_TOKENS = 4096

SYSTEM_PROMPT_DEFAULT = "You are a helpful, clear and concise assistant."
SYSTEM_PROMPT_CODING = (
    "You are an expert programmer. Always respond with clean, well-commented code when appropriate."
)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ChatConfig:
    """Settings that stay fixed for the lifetime of one process."""

    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    api_key: str = DEFAULT_API_KEY
    temperature: float = DEFAULT_TEMPERATURE
    max_history: int = MAX_HISTORY
    max_tokens: int = MAX_TOKENS
    chat_dir: Path = Path.home() / ".local-ai-chat"
    log_level: str = "WARNING"


def read_settings_file(path: Path) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` lines, skipping blanks and ``#`` comments."""

    settings: Dict[str, str] = {}
    if not path.is_file():
        return settings
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        settings[key.strip()] = value.strip().strip('"').strip("'")
    return settings


def get_env(name: str, settings: Optional[Dict[str, str]] = None) -> Optional[str]:
    """Return an environment value, falling back to the settings file."""

    value = os.getenv(name)
    if value is None and settings:
        value = settings.get(name)
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def _float_setting(name: str, raw: Optional[str], default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        log.warning("Ignoring non-numeric %s=%r", name, raw)
        return default
    if not 0.0 <= value <= 2.0:
        log.warning("Ignoring out-of-range %s=%r (expected 0-2)", name, raw)
        return default
    return value


def _int_setting(name: str, raw: Optional[str], default: int) -> int:
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning("Ignoring non-integer %s=%r", name, raw)
        return default
    if value < 2:
        log.warning("Ignoring %s=%r (must be at least 2)", name, raw)
        return default
    return value


def load_config(
    *,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    temperature: Optional[float] = None,
    max_history: Optional[int] = None,
) -> ChatConfig:
    """Build a :class:`ChatConfig`, letting explicit arguments win."""

    root = chat_home()
    settings = read_settings_file(config_file(root))

    resolved_model = model or get_env("OLLAMA_MODEL", settings) or DEFAULT_MODEL
    resolved_url = base_url or get_env("OLLAMA_BASE_URL", settings) or DEFAULT_BASE_URL
    if temperature is None:
        temperature = _float_setting(
            "LOCAL_AI_CHAT_TEMPERATURE",
            get_env("LOCAL_AI_CHAT_TEMPERATURE", settings),
            DEFAULT_TEMPERATURE,
        )
    if max_history is None:
        max_history = _int_setting(
            "LOCAL_AI_CHAT_MAX_HISTORY",
            get_env("LOCAL_AI_CHAT_MAX_HISTORY", settings),
            MAX_HISTORY,
        )

    return ChatConfig(
        model=resolved_model,
        base_url=resolved_url.rstrip("/"),
        api_key=get_env("OLLAMA_API_KEY", settings) or DEFAULT_API_KEY,
        temperature=temperature,
        max_history=max_history,
        chat_dir=root,
        log_level=(get_env("LOCAL_AI_CHAT_LOG_LEVEL", settings) or "WARNING").upper(),
    )


def configure_logging(level: str = "WARNING", *, verbose: bool = False) -> None:
    """Route diagnostics to stderr; ``verbose`` forces DEBUG."""

    resolved = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)


__all__ = [
    "ChatConfig",
    "DEFAULT_BASE_URL",
    "DEFAULT_MODEL",
    "DEFAULT_TEMPERATURE",
    "MAX_HISTORY",
    "MAX_TOKENS",
    "SYSTEM_PROMPT_CODING",
    "SYSTEM_PROMPT_DEFAULT",
    "configure_logging",
    "get_env",
    "load_config",
    "read_settings_file",
]

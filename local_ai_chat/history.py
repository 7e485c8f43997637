"""Flat-file JSON persistence for named conversations."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence

from .paths import ensure_chat_home
from .session import ROLES, Message

DEFAULT_NAME = "conversation"

log = logging.getLogger(__name__)


class ConversationStoreError(Exception):
    """Base class for persistence failures."""


class InvalidConversationName(ConversationStoreError, ValueError):
    """Raised when a name would escape the storage directory."""


class ConversationFormatError(ConversationStoreError):
    """Raised when a saved file is not a list of role/content records."""


def _validate_records(data: Any, path: Path) -> List[Message]:
    if not isinstance(data, list):
        raise ConversationFormatError(f"{path.name}: expected a JSON array of messages")
    records: List[Message] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ConversationFormatError(f"{path.name}: entry {index} is not an object")
        role = item.get("role")
        content = item.get("content")
        if role not in ROLES:
            raise ConversationFormatError(f"{path.name}: entry {index} has unknown role {role!r}")
        if not isinstance(content, str):
            raise ConversationFormatError(f"{path.name}: entry {index} has no text content")
        records.append({"role": role, "content": content})
    return records


class ConversationStore:
    """Reads and writes ``<root>/<name>.json``.

    The store keeps no reference to the transcripts it handles; data is
    copied in on save and handed back as fresh lists on load.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def path_for(self, name: str) -> Path:
        cleaned = (name or "").strip() or DEFAULT_NAME
        if cleaned in {".", ".."} or Path(cleaned).name != cleaned or "\\" in cleaned:
            raise InvalidConversationName(f"Invalid conversation name: {name!r}")
        return self.root / f"{cleaned}.json"

    def save(self, messages: Sequence[Message], name: str = DEFAULT_NAME) -> Path:
        path = self.path_for(name)
        ensure_chat_home(self.root)
        payload = [{"role": m["role"], "content": m["content"]} for m in messages]
        tmp_path = path.with_suffix(".tmp")
        try:
            tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
        log.debug("Saved %d messages to %s", len(payload), path)
        return path

    def load(self, name: str = DEFAULT_NAME) -> Optional[List[Message]]:
        """Return the saved messages, or ``None`` when no such file exists."""

        path = self.path_for(name)
        if not path.is_file():
            log.debug("No saved conversation at %s", path)
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ConversationFormatError(f"{path.name}: {exc}") from exc
        messages = _validate_records(data, path)
        log.debug("Loaded %d messages from %s", len(messages), path)
        return messages

    def list(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(p.stem for p in self.root.glob("*.json") if p.is_file())


__all__ = [
    "DEFAULT_NAME",
    "ConversationFormatError",
    "ConversationStore",
    "ConversationStoreError",
    "InvalidConversationName",
]

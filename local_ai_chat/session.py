"""Session state and the rolling conversation transcript."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List

from .config import (
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    MAX_HISTORY,
    SYSTEM_PROMPT_CODING,
    SYSTEM_PROMPT_DEFAULT,
)

Message = Dict[str, str]

ROLES = ("system", "user", "assistant")


def system_prompt_for(coding_mode: bool) -> str:
    return SYSTEM_PROMPT_CODING if coding_mode else SYSTEM_PROMPT_DEFAULT


def temperature_in_range(value: float) -> bool:
    return 0.0 <= value <= 2.0


@dataclass(frozen=True, slots=True)
class SessionState:
    """Model settings for the live chat. Commands return updated copies."""

    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    coding_mode: bool = False

    @property
    def system_prompt(self) -> str:
        return system_prompt_for(self.coding_mode)

    @property
    def mode_label(self) -> str:
        return "coding" if self.coding_mode else "normal"

    def with_model(self, model: str) -> "SessionState":
        return replace(self, model=model)

    def with_temperature(self, temperature: float) -> "SessionState":
        if not temperature_in_range(temperature):
            raise ValueError(f"temperature must be within [0, 2], got {temperature}")
        return replace(self, temperature=temperature)

    def toggled_coding(self) -> "SessionState":
        return replace(self, coding_mode=not self.coding_mode)


class Transcript:
    """Ordered chat history whose first entry is always the system prompt.

    The container is mutable, but only through the methods below; callers
    receive copies from :attr:`messages` and :meth:`snapshot` so nothing else
    can alias the live list.
    """

    def __init__(self, system_prompt: str, *, max_history: int = MAX_HISTORY) -> None:
        if max_history < 2:
            raise ValueError("max_history must leave room for at least one message")
        self.max_history = max_history
        self._messages: List[Message] = [{"role": "system", "content": system_prompt}]

    @classmethod
    def for_state(cls, state: SessionState, *, max_history: int = MAX_HISTORY) -> "Transcript":
        return cls(state.system_prompt, max_history=max_history)

    def __len__(self) -> int:
        return len(self._messages)

    def __getitem__(self, index: int) -> Message:
        return dict(self._messages[index])

    @property
    def system(self) -> Message:
        return dict(self._messages[0])

    @property
    def messages(self) -> List[Message]:
        """Copy of the history in the shape the completion API expects."""

        return [dict(message) for message in self._messages]

    def snapshot(self) -> List[Message]:
        return deepcopy(self._messages)

    def append(self, role: str, content: str) -> None:
        if role not in ("user", "assistant"):
            raise ValueError(f"cannot append a {role!r} message")
        self._messages.append({"role": role, "content": content})

    def append_user(self, content: str) -> None:
        """Record a user turn, then enforce the history cap."""

        self.append("user", content)
        self.truncate_to(self.max_history)

    def append_assistant(self, content: str) -> None:
        self.append("assistant", content)

    def truncate_to(self, limit: int) -> int:
        """Drop the oldest non-system messages until ``len(self) <= limit``.

        Returns the number of messages removed.
        """

        limit = max(limit, 1)
        excess = len(self._messages) - limit
        if excess <= 0:
            return 0
        del self._messages[1 : 1 + excess]
        return excess

    def clear(self) -> None:
        self.truncate_to(1)

    def set_system(self, content: str) -> None:
        self._messages[0] = {"role": "system", "content": content}

    def replace(self, messages: Iterable[Message]) -> None:
        """Adopt ``messages`` wholesale, keeping the system-first invariant.

        The history cap is not applied here; the next user turn applies it.
        """

        incoming = [{"role": str(m["role"]), "content": str(m["content"])} for m in messages]
        if not incoming or incoming[0]["role"] != "system":
            incoming.insert(0, {"role": "system", "content": self._messages[0]["content"]})
        self._messages = incoming

    def estimated_tokens(self) -> int:
        """Very rough context size, about four characters per token."""

        chars = sum(len(message["content"]) for message in self._messages)
        return chars // 4


__all__ = [
    "Message",
    "ROLES",
    "SessionState",
    "Transcript",
    "system_prompt_for",
    "temperature_in_range",
]

"""Coverage for the transcript history cap and session state copies."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from local_ai_chat.config import SYSTEM_PROMPT_CODING, SYSTEM_PROMPT_DEFAULT
from local_ai_chat.session import SessionState, Transcript


def _filled(count: int, *, max_history: int = 30) -> Transcript:
    transcript = Transcript(SYSTEM_PROMPT_DEFAULT, max_history=max_history)
    for index in range(count):
        transcript.append_user(f"message {index}")
    return transcript


def test_new_transcript_starts_with_system_prompt() -> None:
    transcript = Transcript.for_state(SessionState(coding_mode=True))
    assert len(transcript) == 1
    assert transcript[0] == {"role": "system", "content": SYSTEM_PROMPT_CODING}


@pytest.mark.parametrize("max_history", [2, 5, 30])
def test_append_user_caps_length_and_keeps_system(max_history: int) -> None:
    transcript = _filled(max_history * 3, max_history=max_history)
    assert len(transcript) == max_history
    assert transcript[0] == {"role": "system", "content": SYSTEM_PROMPT_DEFAULT}
    # The newest messages survive, the oldest are dropped.
    assert transcript[-1]["content"] == f"message {max_history * 3 - 1}"
    assert transcript[1]["content"] == f"message {max_history * 3 - (max_history - 1)}"


def test_truncate_to_reports_removed_count() -> None:
    transcript = _filled(10)
    assert transcript.truncate_to(4) == 7
    assert len(transcript) == 4
    assert transcript.truncate_to(10) == 0


def test_clear_keeps_only_system_message() -> None:
    transcript = _filled(5)
    transcript.clear()
    assert transcript.messages == [{"role": "system", "content": SYSTEM_PROMPT_DEFAULT}]


def test_messages_are_copies() -> None:
    transcript = _filled(1)
    copy = transcript.messages
    copy[0]["content"] = "tampered"
    copy.append({"role": "user", "content": "extra"})
    assert transcript[0]["content"] == SYSTEM_PROMPT_DEFAULT
    assert len(transcript) == 2


def test_replace_inserts_current_system_prompt_when_missing() -> None:
    transcript = Transcript(SYSTEM_PROMPT_DEFAULT, max_history=3)
    transcript.replace(
        [
            {"role": "user", "content": "a"},
            {"role": "assistant", "content": "b"},
            {"role": "user", "content": "c"},
        ]
    )
    assert transcript[0] == {"role": "system", "content": SYSTEM_PROMPT_DEFAULT}
    assert [m["content"] for m in transcript.messages[1:]] == ["a", "b", "c"]

    # Adopted as saved; the cap applies on the next user turn.
    transcript.append_user("d")
    assert [m["content"] for m in transcript.messages[1:]] == ["c", "d"]


def test_append_rejects_system_role() -> None:
    transcript = Transcript(SYSTEM_PROMPT_DEFAULT)
    with pytest.raises(ValueError):
        transcript.append("system", "second system prompt")


def test_session_state_updates_return_new_values() -> None:
    state = SessionState(model="gemma3", temperature=0.7)
    hotter = state.with_temperature(1.5)
    assert state.temperature == 0.7
    assert hotter.temperature == 1.5
    assert state.with_model("llama3.2").model == "llama3.2"
    assert state.toggled_coding().system_prompt == SYSTEM_PROMPT_CODING
    with pytest.raises(ValueError):
        state.with_temperature(2.5)

"""Slash-command dispatcher for the interactive chat loop."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from .colors import color
from .config import SYSTEM_PROMPT_CODING, SYSTEM_PROMPT_DEFAULT
from .history import DEFAULT_NAME, ConversationStore, ConversationStoreError
from .session import SessionState, Transcript, temperature_in_range

EXIT_WORDS = frozenset({"exit", "quit", "bye"})

# Commands that take no argument; trailing text sends the line to the model.
BARE_COMMANDS = frozenset({"/clear", "/help", "/status", "/code", "/multi"})

HELP_TEXT = """\
Commands:
  /clear          Clear conversation
  /save [name]    Save chat (default: conversation)
  /load [name]    Load chat (default: conversation)
  /model <name>   Change model (e.g. /model llama3.2)
  /temp <0-2>     Change temperature
  /code           Toggle coding assistant mode
  /multi          Enter multi-line mode (type /end to send)
  /status         Show model, temperature and mode
  /help           Show this help
  exit / bye      Exit
"""

log = logging.getLogger(__name__)


class Action(enum.Enum):
    EXIT = "exit"
    CONTINUE = "continue"
    PASS_THROUGH = "pass_through"


@dataclass(frozen=True, slots=True)
class DispatchResult:
    action: Action
    state: SessionState


def split_command(line: str) -> Tuple[str, str]:
    """Return ``(lowercased command token, argument with original case)``."""

    parts = line.strip().split(maxsplit=1)
    if not parts:
        return "", ""
    rest = parts[1].strip() if len(parts) > 1 else ""
    return parts[0].lower(), rest


def print_help() -> None:
    print(color(HELP_TEXT, fg="cyan"))


def print_status(transcript: Transcript, state: SessionState) -> None:
    mode = color(state.mode_label, fg="green" if state.coding_mode else "yellow")
    print(
        f"{color('Model:', fg='cyan')} {state.model}  |  "
        f"{color('Temp:', fg='cyan')} {state.temperature:.2f}  |  "
        f"{color('Mode:', fg='cyan')} {mode}  |  "
        f"{len(transcript)} messages, ctx ~{transcript.estimated_tokens():,} tok"
    )


def _cmd_clear(arg: str, transcript: Transcript, state: SessionState, store: ConversationStore) -> SessionState:
    transcript.clear()
    print(color("Conversation cleared.", fg="green"))
    return state


def _cmd_help(arg: str, transcript: Transcript, state: SessionState, store: ConversationStore) -> SessionState:
    print_help()
    return state


def _cmd_status(arg: str, transcript: Transcript, state: SessionState, store: ConversationStore) -> SessionState:
    print_status(transcript, state)
    return state


def _cmd_save(arg: str, transcript: Transcript, state: SessionState, store: ConversationStore) -> SessionState:
    name = arg or DEFAULT_NAME
    try:
        store.save(transcript.snapshot(), name)
    except (ConversationStoreError, OSError) as exc:
        log.warning("Save of %r failed: %s", name, exc)
        print(color(f"Could not save {name}: {exc}", fg="red"))
        return state
    print(color(f"Saved to: {name}.json", fg="green"))
    return state


def _sync_mode(transcript: Transcript, state: SessionState) -> SessionState:
    """Match ``coding_mode`` to the system prompt a loaded file carried."""

    prompt = transcript[0]["content"]
    if prompt == SYSTEM_PROMPT_CODING and not state.coding_mode:
        return state.toggled_coding()
    if prompt == SYSTEM_PROMPT_DEFAULT and state.coding_mode:
        return state.toggled_coding()
    return state


def _cmd_load(arg: str, transcript: Transcript, state: SessionState, store: ConversationStore) -> SessionState:
    name = arg or DEFAULT_NAME
    try:
        loaded = store.load(name)
    except (ConversationStoreError, OSError) as exc:
        log.warning("Load of %r failed: %s", name, exc)
        print(color(f"Could not load {name}: {exc}", fg="red"))
        return state
    if loaded is None:
        print(color(f"File not found: {name}", fg="red"))
        return state
    transcript.replace(loaded)
    print(color(f"Loaded: {name}.json", fg="green"))
    return _sync_mode(transcript, state)


def _cmd_model(arg: str, transcript: Transcript, state: SessionState, store: ConversationStore) -> SessionState:
    if not arg:
        log.debug("Ignoring /model without a name")
        return state
    print(color(f"Model switched to: {arg}", fg="green"))
    return state.with_model(arg)


def _cmd_code(arg: str, transcript: Transcript, state: SessionState, store: ConversationStore) -> SessionState:
    new_state = state.toggled_coding()
    transcript.set_system(new_state.system_prompt)
    print(color(f"Coding mode: {'ON' if new_state.coding_mode else 'OFF'}", fg="green"))
    return new_state


def _cmd_temp(arg: str, transcript: Transcript, state: SessionState, store: ConversationStore) -> SessionState:
    try:
        value = float(arg)
    except ValueError:
        log.debug("Ignoring non-numeric temperature %r", arg)
        return state
    if not temperature_in_range(value):
        log.debug("Ignoring out-of-range temperature %r", value)
        return state
    print(color(f"Temperature set to {value:g}", fg="green"))
    return state.with_temperature(value)


def _cmd_multi(arg: str, transcript: Transcript, state: SessionState, store: ConversationStore) -> SessionState:
    # The REPL consumes /multi before dispatch; nothing to do here.
    return state


Handler = Callable[[str, Transcript, SessionState, ConversationStore], SessionState]

COMMANDS: Dict[str, Handler] = {
    "/clear": _cmd_clear,
    "/help": _cmd_help,
    "/status": _cmd_status,
    "/save": _cmd_save,
    "/load": _cmd_load,
    "/model": _cmd_model,
    "/code": _cmd_code,
    "/temp": _cmd_temp,
    "/multi": _cmd_multi,
}


def dispatch(
    line: str,
    transcript: Transcript,
    state: SessionState,
    *,
    store: ConversationStore,
) -> DispatchResult:
    """Run ``line`` as a command, or report that it should go to the model."""

    if line.strip().lower() in EXIT_WORDS:
        return DispatchResult(Action.EXIT, state)

    token, arg = split_command(line)
    handler = COMMANDS.get(token)
    if handler is None or (arg and token in BARE_COMMANDS):
        return DispatchResult(Action.PASS_THROUGH, state)
    log.debug("Dispatching %s", token)
    return DispatchResult(Action.CONTINUE, handler(arg, transcript, state, store))


__all__ = [
    "Action",
    "BARE_COMMANDS",
    "COMMANDS",
    "DispatchResult",
    "EXIT_WORDS",
    "HELP_TEXT",
    "dispatch",
    "print_help",
    "print_status",
    "split_command",
]

"""
Interactive chat loop for a local OpenAI-compatible completions endpoint.

Defaults target Ollama at http://localhost:11434/v1. Replies are streamed to
the terminal as they arrive; slash commands adjust the session in between.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Callable, List, Optional

try:
    import readline  # type: ignore  # noqa: F401  (line editing for input())
except ImportError:  # pragma: no cover - platform without readline
    readline = None  # type: ignore

from .args import parse_chat_args
from .colors import color
from .commands import Action, dispatch, print_status
from .config import MAX_TOKENS, configure_logging, load_config
from .history import ConversationStore
from .llm import BaseChatClient, CompletionError, ModelNotFoundError, build_client
from .paths import ensure_chat_home
from .session import SessionState, Transcript

RULE = "─" * 60

log = logging.getLogger(__name__)


@dataclass
class MultiLineBuffer:
    """Collects lines between ``/multi`` and ``/end`` into one message."""

    active: bool = False
    lines: List[str] = field(default_factory=list)

    def feed(self, raw: str) -> Optional[str]:
        """Consume one input line; return text ready for dispatch, if any."""

        if not self.active:
            text = raw.strip()
            if not text:
                return None
            if text.lower() == "/multi":
                self.active = True
                return None
            return text

        if raw.strip().lower() == "/end":
            joined = "\n".join(self.lines)
            self.active = False
            self.lines = []
            return joined if joined.strip() else None
        self.lines.append(raw.rstrip("\r\n"))
        return None


def print_banner(state: SessionState) -> None:
    print(color("LOCAL AI CHAT", fg="blue", bold=True))
    print(color("Type /help for commands, exit or Ctrl+D to quit.", fg="blue"))
    print(
        color("Tip: ", fg="yellow")
        + color(f"ollama pull {state.model}", fg="cyan")
        + color(" if the model is missing\n", fg="yellow")
    )


def report_failure(exc: CompletionError, state: SessionState) -> None:
    print(color("Error:", fg="red", bold=True), exc)
    if isinstance(exc, ModelNotFoundError):
        print(
            color(f"Tip: ollama pull {exc.model}", fg="yellow")
            + "\n"
            + color("     or use /model <name> to switch", fg="gray")
        )


def one_turn(
    user_text: str,
    transcript: Transcript,
    state: SessionState,
    client: BaseChatClient,
    *,
    max_tokens: int = MAX_TOKENS,
) -> Optional[str]:
    """Send one user message and stream the reply into the transcript.

    Returns the assistant text, or ``None`` when the request failed or was
    interrupted. Nothing from a failed stream is committed to the transcript.
    """

    transcript.append_user(user_text)
    print(color("AI: ", fg="cyan", bold=True), end="", flush=True)

    pieces: List[str] = []
    stream = None
    try:
        stream = client.stream_chat(
            transcript.messages,
            model=state.model,
            temperature=state.temperature,
            max_tokens=max_tokens,
        )
        for piece in stream:
            print(piece, end="", flush=True)
            pieces.append(piece)
    except CompletionError as exc:
        print()
        log.info("Completion failed for model %s: %s", state.model, exc)
        report_failure(exc, state)
        return None
    except KeyboardInterrupt:
        print()
        print(color("Interrupted.", fg="yellow"))
        log.info("Stream interrupted after %d fragments; reply discarded", len(pieces))
        return None
    finally:
        close = getattr(stream, "close", None)
        if callable(close):
            close()

    print("\n")
    answer = "".join(pieces)
    transcript.append_assistant(answer)
    return answer


def run_chat(
    state: SessionState,
    transcript: Transcript,
    *,
    client: BaseChatClient,
    store: ConversationStore,
    read_line: Callable[[str], str] = input,
    max_tokens: int = MAX_TOKENS,
    show_status: bool = True,
) -> SessionState:
    """Run the prompt loop until exit, EOF or Ctrl+C; return the final state."""

    buffer = MultiLineBuffer()
    while True:
        if show_status and not buffer.active:
            print(color(RULE, dim=True))
            print_status(transcript, state)
            print(color(RULE, dim=True))

        prompt = color("... ", fg="gray") if buffer.active else color("You: ", bold=True)
        try:
            raw = read_line(prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        was_active = buffer.active
        text = buffer.feed(raw)
        if buffer.active and not was_active:
            print(color("Multi-line mode: type /end when finished.", fg="cyan"))
        elif was_active and not buffer.active:
            print(color("Multi-line input sent.", fg="gray"))
        if text is None:
            continue

        result = dispatch(text, transcript, state, store=store)
        state = result.state
        if result.action is Action.EXIT:
            break
        if result.action is Action.CONTINUE:
            continue

        print()
        one_turn(text, transcript, state, client, max_tokens=max_tokens)

    print(color("Goodbye!", fg="green"))
    return state


def main(argv: List[str]) -> int:
    args = parse_chat_args(argv)
    config = load_config(
        model=args.model,
        base_url=args.url,
        temperature=args.temp,
        max_history=args.max_history,
    )
    configure_logging(config.log_level, verbose=args.verbose)

    try:
        ensure_chat_home(config.chat_dir)
    except OSError as exc:
        log.warning("Could not create %s: %s", config.chat_dir, exc)

    state = SessionState(model=config.model, temperature=config.temperature, coding_mode=args.code)
    transcript = Transcript.for_state(state, max_history=config.max_history)
    client = build_client(base_url=config.base_url, api_key=config.api_key)
    store = ConversationStore(config.chat_dir)

    print_banner(state)
    run_chat(
        state,
        transcript,
        client=client,
        store=store,
        max_tokens=config.max_tokens,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))

"""Multitool entrypoint: ``chat`` (default), ``list-models`` and ``version``."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from .app import main as chat_main
from .args import parse_list_models_args
from .colors import color
from .config import configure_logging, load_config
from .models import print_models
from .version import __version__


def _print_root_help() -> None:
    print(color("local-ai-chat", fg="magenta", bold=True), "- chat with a local LLM from the terminal\n")
    print(
        "Usage:\n"
        "  local-ai-chat [chat options]\n"
        "  local-ai-chat chat [--model NAME] [--temp FLOAT] [--code]\n"
        "  local-ai-chat list-models\n"
        "  local-ai-chat version\n"
        "\n"
        "Common commands:\n"
        "  chat           start an interactive chat session (default)\n"
        "  list-models    list the models installed on the Ollama server\n"
        "  version        print the current version and exit\n"
        "\n"
        "Run `local-ai-chat chat --help` for chat options."
    )


def _run_chat(argv: Sequence[str]) -> int:
    return chat_main(list(argv))


def _run_list_models(argv: Sequence[str]) -> int:
    args = parse_list_models_args(list(argv))
    config = load_config(base_url=args.url)
    configure_logging(config.log_level, verbose=args.verbose)
    return print_models(config.base_url)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entrypoint shared by the console script and ``python -m``."""

    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        return _run_chat([])

    first = argv[0]
    if first in {"-h", "--help", "help"}:
        _print_root_help()
        return 0

    if first in {"-V", "--version", "version"}:
        print(__version__)
        return 0

    if first == "chat":
        return _run_chat(argv[1:])

    if first == "list-models":
        return _run_list_models(argv[1:])

    # No subcommand: treat the arguments as chat options.
    return _run_chat(argv)

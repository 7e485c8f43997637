"""Argument parsing for the chat and list-models commands."""

from __future__ import annotations

import argparse
from typing import List

from .config import DEFAULT_BASE_URL, DEFAULT_MODEL


def temperature_arg(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {raw!r}") from None
    if not 0.0 <= value <= 2.0:
        raise argparse.ArgumentTypeError(f"temperature must be between 0 and 2, got {raw}")
    return value


def history_arg(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {raw!r}") from None
    if value < 2:
        raise argparse.ArgumentTypeError("history must keep at least 2 messages")
    return value


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-U", "--url",
        default=None,
        help=f"OpenAI-compatible base URL (env OLLAMA_BASE_URL, default {DEFAULT_BASE_URL})",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug diagnostics to stderr",
    )


def parse_chat_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="local-ai-chat chat",
        description="Interactive chat with a local LLM server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  local-ai-chat\n"
            "  local-ai-chat chat --model llama3.2 --temp 0.3\n"
            "  local-ai-chat --code\n"
        ),
    )
    parser.add_argument(
        "-M", "--model",
        default=None,
        help=f"Model name (env OLLAMA_MODEL, default {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "-t", "--temp",
        type=temperature_arg,
        default=None,
        help="Sampling temperature, 0.0-2.0 (default 0.7)",
    )
    parser.add_argument(
        "--code",
        action="store_true",
        help="Start in coding mode",
    )
    parser.add_argument(
        "--max-history",
        dest="max_history",
        type=history_arg,
        default=None,
        help="Messages kept in context, system prompt included (default 30)",
    )
    _add_common(parser)
    return parser.parse_args(argv)


def parse_list_models_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="local-ai-chat list-models",
        description="List the models installed on the local Ollama server",
    )
    _add_common(parser)
    return parser.parse_args(argv)


__all__ = ["parse_chat_args", "parse_list_models_args", "temperature_arg"]

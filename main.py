"""Repository-level driver for the local-ai-chat multitool CLI."""

from __future__ import annotations

import sys

from local_ai_chat.multitool import main as cli_main


def main(argv: list[str]) -> int:
    return cli_main(argv)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))

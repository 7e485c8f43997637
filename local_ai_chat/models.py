"""Listing the models installed on the local Ollama server."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from .colors import color

_FRACTION_RE = re.compile(r"\.(\d+)")

log = logging.getLogger(__name__)


class ModelListError(RuntimeError):
    """Raised when the model catalogue cannot be fetched or parsed."""


@dataclass(slots=True)
class ModelInfo:
    name: str
    size: int = 0
    modified_at: Optional[str] = None
    quantization: Optional[str] = None

    @property
    def size_label(self) -> str:
        return f"{self.size / 1e9:.1f} GB"

    @property
    def modified_label(self) -> str:
        if not isinstance(self.modified_at, str) or not self.modified_at.strip():
            return "-"
        text = self.modified_at.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        # Ollama reports nanosecond precision, which fromisoformat rejects.
        fraction = _FRACTION_RE.search(text)
        if fraction:
            text = f"{text[: fraction.start()]}.{fraction.group(1)[:6]}{text[fraction.end():]}"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return self.modified_at
        return parsed.astimezone().strftime("%Y-%m-%d %H:%M")


def api_root(base_url: str) -> str:
    """Strip the OpenAI-compatible ``/v1`` suffix to reach the native API."""

    root = base_url.rstrip("/")
    if root.endswith("/v1"):
        root = root[: -len("/v1")]
    return root


def _parse_model(entry: Dict[str, Any]) -> ModelInfo:
    details = entry.get("details") or {}
    modified = entry.get("modified_at")
    try:
        size = int(entry.get("size") or 0)
    except (TypeError, ValueError):
        size = 0
    return ModelInfo(
        name=str(entry.get("name") or entry.get("model") or "?"),
        size=size,
        modified_at=modified if isinstance(modified, str) else None,
        quantization=details.get("quantization_level") if isinstance(details, dict) else None,
    )


def fetch_models(base_url: str, *, timeout: float = 10.0) -> List[ModelInfo]:
    url = f"{api_root(base_url)}/api/tags"
    log.debug("GET %s", url)
    req = Request(url, headers={"Accept": "application/json"})
    try:
        with urlopen(req, timeout=timeout) as resp:  # nosec - local server
            charset = resp.headers.get_content_charset() or "utf-8"
            raw = resp.read()
    except HTTPError as he:
        raise ModelListError(f"HTTP {he.code} from {url}") from he
    except URLError as ue:
        raise ModelListError(f"Failed to reach {url}: {ue.reason}") from ue
    except OSError as oe:
        raise ModelListError(f"Network error talking to {url}: {oe}") from oe

    try:
        payload = json.loads(raw.decode(charset))
    except (UnicodeDecodeError, LookupError) as exc:
        raise ModelListError(f"Undecodable response from {url}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ModelListError(f"Server returned non-JSON response: {exc}") from exc

    entries = payload.get("models") if isinstance(payload, dict) else None
    if not isinstance(entries, list):
        return []
    return [_parse_model(entry) for entry in entries if isinstance(entry, dict)]


def format_model_table(models: List[ModelInfo]) -> List[str]:
    headers = ("NAME", "SIZE", "MODIFIED", "QUANTIZATION")
    rows = [(m.name, m.size_label, m.modified_label, m.quantization or "-") for m in models]
    widths = [max([len(headers[i])] + [len(row[i]) for row in rows]) for i in range(len(headers))]

    def fmt(cells) -> str:
        return "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()

    lines = [fmt(headers), fmt(["-" * w for w in widths])]
    lines.extend(fmt(row) for row in rows)
    return lines


def print_models(base_url: str) -> int:
    """Print the installed models; returns a process exit code."""

    try:
        models = fetch_models(base_url)
    except ModelListError as exc:
        log.debug("Model listing failed: %s", exc)
        print(color("Failed to list models:", fg="red"), exc)
        print(color(f"Is Ollama running on {base_url} ?", fg="gray"))
        return 1

    if not models:
        print(color("No models found. Pull one with: ollama pull llama3.2", fg="yellow"))
        return 0

    print(color("\nInstalled Ollama Models:\n", bold=True))
    for line in format_model_table(models):
        print(line)
    return 0


__all__ = [
    "ModelInfo",
    "ModelListError",
    "api_root",
    "fetch_models",
    "format_model_table",
    "print_models",
]

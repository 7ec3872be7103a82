from __future__ import annotations

import json
import sys
from typing import Protocol

from mimedetect.types import MatchKind, MatchResult


class Writer(Protocol):
    def write(self, text: str) -> None: ...


class StdoutWriter(Writer):
    def write(self, text: str) -> None:
        sys.stdout.write(text)


class StringWriter(Writer):
    def __init__(self) -> None:
        self._parts: list[str] = []

    def write(self, text: str) -> None:
        self._parts.append(text)

    def text(self) -> str:
        return "".join(self._parts)


class Formatter(Protocol):
    def format(self, path: str, result: MatchResult) -> str: ...
    def error(self, path: str, message: str) -> str: ...


class TextFormatter(Formatter):
    """One `path: verdict` line per input."""

    def format(self, path: str, result: MatchResult) -> str:
        if result.kind is MatchKind.NO_MATCH:
            return f"{path}: unknown\n"
        verdict = f"{result.extension or '?'} ({result.mime_type})"
        if result.kind is MatchKind.PLAIN_TEXT:
            verdict += " [text heuristic]"
        elif result.kind is MatchKind.UNREADABLE_CONTAINER:
            verdict += f" [unreadable container: {result.error}]"
        return f"{path}: {verdict}\n"

    def error(self, path: str, message: str) -> str:
        return f"{path}: error: {message}\n"


class JsonFormatter(Formatter):
    """JSON Lines: one object per input."""

    def format(self, path: str, result: MatchResult) -> str:
        payload = {
            "path": path,
            "kind": result.kind.name.lower(),
            "extension": result.extension or None,
            "mime_type": result.mime_type or None,
        }
        if result.error is not None:
            payload["error"] = result.error
        return json.dumps(payload) + "\n"

    def error(self, path: str, message: str) -> str:
        return json.dumps({"path": path, "kind": "error", "error": message}) + "\n"


FORMATTERS: dict[str, type[Formatter]] = {"text": TextFormatter, "json": JsonFormatter}

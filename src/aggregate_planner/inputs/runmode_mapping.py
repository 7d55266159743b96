"""
aggregate-planner - runmode mapping loader.

File: src/aggregate_planner/inputs/runmode_mapping.py

Purpose
- Read the ``runmode.mapping`` properties file written by the content-package
  to feature-model converter into a token -> feature file mapping.

Functional requirements
- Java properties syntax: comments, ``=``/``:``/whitespace separators,
  line continuations and backslash escapes; later duplicates win.
- Missing file is a fatal, path-carrying error.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

DEFAULT_MAPPING_FILE: Final[str] = "runmode.mapping"
PROPERTIES_ENCODING: Final[str] = "iso-8859-1"

_COMMENT_MARKERS: Final[tuple[str, ...]] = ("#", "!")
_SEPARATORS: Final[frozenset[str]] = frozenset({"=", ":"})
_WHITESPACE: Final[frozenset[str]] = frozenset({" ", "\t", "\f"})
_ESCAPES: Final[dict[str, str]] = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
# Only LF, CR and CRLF terminate a line.
_LINE_BREAK: Final[re.Pattern[str]] = re.compile(r"\r\n|\r|\n")


class RunmodeMappingError(ValueError):
    """Raised when the runmode mapping cannot be read or parsed."""


class MappingNotFoundError(RunmodeMappingError):
    """Raised when the runmode mapping file does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"File generated by content package to feature model converter not found: {path}"
        )


def load_runmode_mapping(
    generated_features_dir: str | Path,
    *,
    filename: str = DEFAULT_MAPPING_FILE,
) -> dict[str, str]:
    """Load ``filename`` from the converter's generated-features directory."""

    return load_properties(Path(generated_features_dir) / filename)


def load_properties(path: str | Path) -> dict[str, str]:
    mapping_path = Path(path)
    if not mapping_path.is_file():
        raise MappingNotFoundError(mapping_path)
    try:
        text = mapping_path.read_text(encoding=PROPERTIES_ENCODING)
    except OSError as exc:
        raise RunmodeMappingError(f"Problem reading {mapping_path}: {exc}") from exc
    return parse_properties(text)


def parse_properties(text: str) -> dict[str, str]:
    """Parse Java ``.properties`` content into an ordered dict."""

    result: dict[str, str] = {}
    for logical_line in _logical_lines(text):
        key, value = _split_entry(logical_line)
        result[key] = value
    return result


def _logical_lines(text: str) -> list[str]:
    lines: list[str] = []
    pending: str | None = None
    for raw in _LINE_BREAK.split(text):
        line = raw.lstrip(" \t\f")
        if pending is None:
            if not line or line.startswith(_COMMENT_MARKERS):
                continue
            pending = line
        else:
            pending += line
        if _ends_with_continuation(pending):
            pending = pending[:-1]
            continue
        lines.append(pending)
        pending = None
    if pending is not None:
        lines.append(pending)
    return lines


def _ends_with_continuation(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _split_entry(line: str) -> tuple[str, str]:
    index = 0
    length = len(line)
    while index < length:
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        index += 1
    key = line[:index]

    while index < length and line[index] in _WHITESPACE:
        index += 1
    if index < length and line[index] in _SEPARATORS:
        index += 1
    while index < length and line[index] in _WHITESPACE:
        index += 1

    return _unescape(key), _unescape(line[index:])


def _unescape(text: str) -> str:
    out: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char != "\\" or index + 1 >= length:
            out.append(char)
            index += 1
            continue
        marker = text[index + 1]
        if marker == "u":
            digits = text[index + 2 : index + 6]
            if len(digits) != 4:
                raise RunmodeMappingError(f"malformed \\uXXXX escape in {text!r}")
            try:
                out.append(chr(int(digits, 16)))
            except ValueError as exc:
                raise RunmodeMappingError(f"malformed \\uXXXX escape in {text!r}") from exc
            index += 6
            continue
        out.append(_ESCAPES.get(marker, marker))
        index += 2
    return "".join(out)


__all__ = [
    "DEFAULT_MAPPING_FILE",
    "MappingNotFoundError",
    "RunmodeMappingError",
    "load_properties",
    "load_runmode_mapping",
    "parse_properties",
]

"""Tolerant field extraction from the small JSON-like documents we exchange.

This is not a full JSON parser. Every helper scans for the first
``"key":`` occurrence and pulls out the value that follows it, returning
``None`` (or an empty list) whenever the expected shape is not there.
"""

from __future__ import annotations

import re
import string
from typing import Iterator

_BARE_TERMINATORS = frozenset(",}]\r\n\t ")
_INT_PATTERN = re.compile(r"[+-]?\d+")
_SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


def _value_start(text: str, key: str) -> int | None:
    """Return the index just past the colon that follows ``"key"``."""

    needle = f'"{key}"'
    key_pos = text.find(needle)
    if key_pos < 0:
        return None
    colon_pos = text.find(":", key_pos + len(needle))
    if colon_pos < 0:
        return None
    return colon_pos + 1


def iter_objects(text: str, start: int) -> Iterator[tuple[int, int]]:
    """Yield ``(begin, end)`` spans of top-level ``{...}`` blocks from ``start``.

    String literals are skipped (including escaped quotes) so braces inside
    values never change the depth. Scanning stops at a ``]`` seen at depth
    zero, which closes the surrounding array.
    """

    in_string = False
    escape = False
    depth = 0
    obj_start: int | None = None
    for pos in range(start, len(text)):
        ch = text[pos]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            if depth == 0:
                obj_start = pos
            depth += 1
        elif ch == "}":
            if depth > 0:
                depth -= 1
                if depth == 0 and obj_start is not None:
                    yield obj_start, pos + 1
                    obj_start = None
        elif ch == "]" and depth == 0:
            return


def _read_quoted(text: str, pos: int) -> str | None:
    # ``pos`` points at the opening quote.
    chars: list[str] = []
    index = pos + 1
    length = len(text)
    while index < length:
        ch = text[index]
        if ch == '"':
            return "".join(chars)
        if ch == "\\":
            index += 1
            if index >= length:
                return None
            escaped = text[index]
            if escaped == "u":
                digits = text[index + 1 : index + 5]
                if len(digits) != 4 or not all(c in string.hexdigits for c in digits):
                    return None
                chars.append(chr(int(digits, 16)))
                index += 5
                continue
            chars.append(_SIMPLE_ESCAPES.get(escaped, escaped))
            index += 1
            continue
        chars.append(ch)
        index += 1
    return None


def _read_scalar(text: str, key: str) -> tuple[str, bool] | None:
    """Return the raw scalar after ``key`` and whether it was quoted."""

    start = _value_start(text, key)
    if start is None:
        return None
    length = len(text)
    pos = start
    while pos < length and text[pos].isspace():
        pos += 1
    if pos >= length:
        return None
    if text[pos] == '"':
        value = _read_quoted(text, pos)
        if value is None:
            return None
        return value, True
    if text[pos] in "{[":
        return None
    end = pos
    while end < length and text[end] not in _BARE_TERMINATORS:
        end += 1
    token = text[pos:end]
    if not token:
        return None
    return token, False


def extract_string_field(text: str, key: str) -> str | None:
    """Return the string (or bare token) stored under ``key``."""

    scalar = _read_scalar(text, key)
    if scalar is None:
        return None
    value, quoted = scalar
    if not quoted and value == "null":
        return None
    return value


def extract_int_field(text: str, key: str) -> int | None:
    scalar = _read_scalar(text, key)
    if scalar is None:
        return None
    match = _INT_PATTERN.match(scalar[0].strip())
    if match is None:
        return None
    return int(match.group(0))


def extract_bool_field(text: str, key: str) -> bool | None:
    scalar = _read_scalar(text, key)
    if scalar is None:
        return None
    value = scalar[0].strip().lower()
    if value in {"true", "1"}:
        return True
    if value in {"false", "0"}:
        return False
    return None


def extract_array_objects(text: str, key: str) -> list[str]:
    """Return every object substring inside the array stored under ``key``."""

    start = _value_start(text, key)
    if start is None:
        return []
    array_pos = text.find("[", start)
    if array_pos < 0:
        return []
    return [text[begin:end] for begin, end in iter_objects(text, array_pos + 1)]


def extract_object_field(text: str, key: str) -> str | None:
    """Return the first complete object substring stored under ``key``."""

    start = _value_start(text, key)
    if start is None:
        return None
    obj_pos = text.find("{", start)
    if obj_pos < 0:
        return None
    for begin, end in iter_objects(text, obj_pos):
        return text[begin:end]
    return None


__all__ = [
    "extract_array_objects",
    "extract_bool_field",
    "extract_int_field",
    "extract_object_field",
    "extract_string_field",
    "iter_objects",
]

from __future__ import annotations

import enum
from typing import Mapping


class QuoteDialect(enum.Enum):
    NONE = "none"
    SINGLE = "single"
    DOUBLE = "double"


_NAME_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")


def strip_comment(line: str) -> str:
    """Remove an unquoted trailing ``#`` comment from a line.

    The line is cut into segments at every ``#``. A segment holding exactly one
    single or double quote opens (or closes) a quoted span. The first segment
    is always kept, later ones only while a span is open or when they close it.
    Scanning stops at the first ``#`` reached outside a span.
    """
    if "#" not in line:
        return line

    kept: list[str] = []
    quotes_open = False
    start = 0
    while start <= len(line):
        end = line.find("#", start)
        if end == -1:
            end = len(line)
        segment = line[start:end]

        if segment.count('"') == 1 or segment.count("'") == 1:
            quotes_open = not quotes_open
        kept.append(segment)

        if not quotes_open:
            break
        start = end + 1

    return "#".join(kept)


def detect_dialect(value: str) -> QuoteDialect:
    """Return the quoting dialect of an already trimmed value.

    Only a value wrapped entirely in one kind of quote counts as quoted.
    """
    if len(value) < 2:
        return QuoteDialect.NONE
    if value[0] == "'" and value[-1] == "'":
        return QuoteDialect.SINGLE
    if value[0] == '"' and value[-1] == '"':
        return QuoteDialect.DOUBLE
    return QuoteDialect.NONE


def decode_double_quoted(value: str) -> str:
    """Decode backslash escapes inside a double-quoted value.

    ``\\n`` and ``\\r`` become control characters. Every other escaped
    character loses its backslash, except ``\\$`` which is left for
    :func:`expand_variables` to see.
    """
    decoded: list[str] = []
    i = 0
    while i < len(value):
        char = value[i]
        if char == "\\" and i + 1 < len(value):
            nxt = value[i + 1]
            if nxt == "n":
                decoded.append("\n")
            elif nxt == "r":
                decoded.append("\r")
            else:
                decoded.append(char + nxt)
            i += 2
            continue
        decoded.append(char)
        i += 1

    text = "".join(decoded)
    out: list[str] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and i + 1 < len(text) and text[i + 1] != "$":
            out.append(text[i + 1])
            i += 2
            continue
        out.append(char)
        i += 1
    return "".join(out)


def _scan_reference(value: str, start: int) -> tuple[int, bool, bool, str]:
    """Scan one ``$`` reference whose ``$`` sits at ``start``.

    Returns ``(end, has_paren, has_name, name)`` where ``end`` is the index
    just past the token.
    """
    i = start + 1
    has_paren = i < len(value) and value[i] == "("
    if has_paren:
        i += 1
    if i < len(value) and value[i] == "{":
        i += 1
    name_start = i
    while i < len(value) and value[i] in _NAME_CHARS:
        i += 1
    name = value[name_start:i]
    if i < len(value) and value[i] == "}":
        i += 1
    return i, has_paren, name != "", name


def expand_variables(value: str, mapping: Mapping[str, str]) -> str:
    """Expand ``$NAME``, ``${NAME}`` style references in a single pass.

    Names are looked up in ``mapping``; unbound names expand to an empty
    string. ``\\$...`` yields the reference literally without the backslash and
    ``$(...)`` is never expanded. Substituted text is not scanned again.
    """
    if "$" not in value:
        return value

    out: list[str] = []
    i = 0
    while i < len(value):
        char = value[i]
        escaped = char == "\\" and i + 1 < len(value) and value[i + 1] == "$"
        if not escaped and char != "$":
            out.append(char)
            i += 1
            continue

        dollar = i + 1 if escaped else i
        end, has_paren, has_name, name = _scan_reference(value, dollar)
        token = value[i:end]
        if escaped:
            out.append(token[1:])
        elif has_paren:
            out.append(token)
        elif has_name:
            out.append(mapping.get(name, ""))
        else:
            out.append(token)
        i = end
    return "".join(out)


def parse_value(raw: str, mapping: Mapping[str, str]) -> str:
    """Turn a raw value into its final string.

    Surrounding spaces are trimmed and one layer of matching quotes removed.
    Double-quoted values get escape decoding; single-quoted values are taken
    verbatim and never expanded.
    """
    value = raw.strip(" ")
    if len(value) <= 1:
        return value

    dialect = detect_dialect(value)
    if dialect is not QuoteDialect.NONE:
        value = value[1:-1]

    if dialect is QuoteDialect.SINGLE:
        return value
    if dialect is QuoteDialect.DOUBLE:
        value = decode_double_quoted(value)
    return expand_variables(value, mapping)

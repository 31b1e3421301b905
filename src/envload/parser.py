from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from envload.scanner import parse_value, strip_comment


logger = logging.getLogger(__name__)


class EnvloadError(RuntimeError):
    pass


class MalformedLineError(EnvloadError):
    """A non-ignorable line that cannot be read as ``KEY=VALUE``."""

    def __init__(
        self,
        message: str,
        *,
        line: str = "",
        line_number: Optional[int] = None,
    ):
        self.line = line
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


@dataclass(frozen=True)
class ParseResult:
    mapping: dict[str, str] = field(default_factory=dict)
    error: Optional[EnvloadError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> dict[str, str]:
        """Raise the recorded error, if any; otherwise return the mapping."""
        if self.error is not None:
            raise self.error
        return self.mapping


def is_ignored_line(line: str) -> bool:
    trimmed = line.strip()
    return trimmed == "" or trimmed.startswith("#")


def split_assignment(line: str) -> tuple[str, str]:
    """Split a line into raw key and raw value.

    The first ``:`` is used (YAML style) when it comes before any ``=``;
    otherwise the first ``=``.
    """
    if line == "":
        raise MalformedLineError("zero length string", line=line)

    first_equals = line.find("=")
    first_colon = line.find(":")
    if first_colon != -1 and (first_equals == -1 or first_colon < first_equals):
        sep = first_colon
    elif first_equals != -1:
        sep = first_equals
    else:
        raise MalformedLineError("can't separate key from value", line=line)

    return line[:sep], line[sep + 1 :]


def normalize_key(raw_key: str) -> str:
    """Trim whitespace and a standalone leading ``export`` from a raw key."""
    key = raw_key.strip()
    parts = key.split(None, 1)
    if len(parts) == 2 and parts[0] == "export":
        key = parts[1].strip()

    if key == "":
        raise MalformedLineError("empty key", line=raw_key)
    return key


def parse_line(line: str, mapping: Mapping[str, str]) -> tuple[str, str]:
    """Parse one non-ignorable line into ``(key, value)``.

    ``mapping`` is the read-only view of everything defined on earlier lines;
    it is only used to expand variable references.
    """
    raw_key, raw_value = split_assignment(strip_comment(line))
    key = normalize_key(raw_key)
    return key, parse_value(raw_value, mapping)


def parse(lines: Iterable[str]) -> ParseResult:
    """Parse env-file lines into an ordered mapping.

    Later assignments win over earlier ones. Parsing stops at the first
    malformed line; the entries read before it are returned together with the
    error.
    """
    mapping: dict[str, str] = {}
    view = MappingProxyType(mapping)

    for number, line in enumerate(lines, start=1):
        if is_ignored_line(line):
            continue
        try:
            key, value = parse_line(line, view)
        except MalformedLineError as exc:
            error = MalformedLineError(str(exc), line=line, line_number=number)
            logger.warning("Stopped parsing at %s", error)
            return ParseResult(mapping=mapping, error=error)
        mapping[key] = value

    logger.debug("Parsed %d keys", len(mapping))
    return ParseResult(mapping=mapping)


def split_lines(text: str) -> list[str]:
    """Split text on ``\\n`` only, dropping a trailing ``\\r`` from each line.

    Other Unicode line boundaries (form feed, U+2028, ...) stay inside the
    line. A final newline does not produce an extra empty line.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_text(text: str) -> ParseResult:
    return parse(split_lines(text))

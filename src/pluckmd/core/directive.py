"""Recognize and decode ``pluck`` directives embedded in markdown.

A directive occupies a whole line (leading/trailing whitespace aside)::

    <!-- pluck("lang", "kind", "name", "source", start, end) -->

``lang``, ``kind``, ``name`` and ``source`` are double-quoted strings without
embedded quotes; ``start`` and ``end`` are signed integers.
"""

import re

from pluckmd.core.languages import normalize_kind, normalize_language
from pluckmd.exceptions import InvalidIndexError, MalformedDirectiveError
from pluckmd.models import Directive

DIRECTIVE_PATTERN = re.compile(r"^\s*<!--\s*pluck\s*\((?P<args>.*)\)\s*-->\s*$")

_QUOTED_FIELD_PATTERN = re.compile(r'"([^"]*)"')

_QUOTED_FIELDS = 4
_NUM_FIELDS = 6


def is_directive(line: str) -> bool:
    return DIRECTIVE_PATTERN.match(line) is not None


def _split_fields(args: str) -> list[tuple[str, bool]]:
    """Split the argument list on commas outside quotes into ``(value, was_quoted)`` pairs."""
    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in args:
        if ch == '"':
            in_quotes = not in_quotes
        if ch == "," and not in_quotes:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))

    fields: list[tuple[str, bool]] = []
    for part in parts:
        stripped = part.strip()
        quoted = _QUOTED_FIELD_PATTERN.fullmatch(stripped)
        if quoted is not None:
            fields.append((quoted.group(1), True))
        else:
            fields.append((stripped, False))
    return fields


def _parse_index(value: str, label: str, line: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise InvalidIndexError(f"invalid {label} index '{value}': {line.strip()}") from None


def parse_directive(line: str) -> Directive:
    match = DIRECTIVE_PATTERN.match(line)
    if match is None:
        raise MalformedDirectiveError(f"not a pluck directive: {line.strip()}")

    fields = _split_fields(match["args"])
    if len(fields) != _NUM_FIELDS or not all(quoted for _, quoted in fields[:_QUOTED_FIELDS]):
        raise MalformedDirectiveError(
            f"directive must have {_NUM_FIELDS} fields (4 quoted strings, 2 integers): {line.strip()}"
        )

    (lang, _), (kind, _), (name, _), (source, _), (start, _), (end, _) = fields
    return Directive(
        lang=normalize_language(lang),
        kind=normalize_kind(kind),
        name=name,
        source=source,
        start=_parse_index(start, "start", line),
        end=_parse_index(end, "end", line),
    )

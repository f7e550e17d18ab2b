"""Line windowing of an extracted snippet.

``(start, end)`` is either a sentinel pair or a half-open range over the
body's lines:

* ``(-1, -1)``: the declaration shape only, body replaced by one ellipsis line.
* ``(0, 0)``: the full, untouched body.
* ``[start, end)``: the selected lines, with an ellipsis line standing in for
  any hidden prefix or suffix.

Anything else raises ``InvalidRangeError``; ranges are never clamped.
"""

from pluckmd.exceptions import InvalidRangeError

EMPTY_START, EMPTY_END = -1, -1
FULL_START, FULL_END = 0, 0
OPENING_BRACE = "{\n"
CLOSING_BRACE = "}\n"
DEFAULT_ELLIPSIS_LINE = "\t// ...\n"


def body_lines(body: str) -> list[str]:
    """Split a body into lines, dropping a blank first and/or last line left over from extraction."""
    lines = body.split("\n")
    if lines and lines[0] == "":
        lines = lines[1:]
    if lines and lines[-1] == "":
        lines = lines[:-1]
    return lines


def window(
    definition: str,
    body: str,
    start: int,
    end: int,
    *,
    braced: bool = True,
    ellipsis_line: str = DEFAULT_ELLIPSIS_LINE,
) -> str:
    opening = OPENING_BRACE if braced else ""
    closing = CLOSING_BRACE if braced else ""

    if (start, end) == (EMPTY_START, EMPTY_END):
        return definition + opening + ellipsis_line + closing
    if (start, end) == (FULL_START, FULL_END):
        return definition + opening + body + closing

    lines = body_lines(body)
    if start < 0 or end < 0 or start > end or end > len(lines):
        raise InvalidRangeError(f"invalid range [start: {start}, end: {end}) for {len(lines)} body lines")

    parts = [definition, opening]
    if start != 0:
        parts.append(ellipsis_line)
    parts.extend(line + "\n" for line in lines[start:end])
    if end != len(lines):
        parts.append(ellipsis_line)
    parts.append(closing)
    return "".join(parts)

"""
Record decoder for timeline lines.

The dialect is comma separated with backslash escaping: ``\\`` makes the next
character literal, double quotes toggle quoted mode and are dropped from the
output. Doubled quotes carry no special meaning.
"""
from __future__ import annotations

from typing import List

from core.exceptions import ResourceLimitExceeded

MAX_LINE_LENGTH = 1048576       # 1 MiB of characters per line
MAX_FIELD_LENGTH = 65536        # 64 KiB of characters per field
MAX_FIELDS_PER_LINE = 256


def validate_line(line: str) -> None:
    if len(line) > MAX_LINE_LENGTH:
        raise ResourceLimitExceeded("line length", MAX_LINE_LENGTH)


def validate_field(field: str) -> None:
    if len(field) > MAX_FIELD_LENGTH:
        raise ResourceLimitExceeded("field length", MAX_FIELD_LENGTH)


def parse_line(line: str) -> List[str]:
    """
    Split one timeline line into fields.

    Args:
        line: Decoded line without its trailing separator

    Returns:
        Ordered list of fields; always at least one (possibly empty) field

    Raises:
        ResourceLimitExceeded: line, field length or field count over the limits
    """
    validate_line(line)

    fields: List[str] = []
    current: List[str] = []
    current_length = 0
    in_quotes = False
    escape_next = False

    for char in line:
        if escape_next:
            escape_next = False
        elif char == "\\":
            escape_next = True
            continue
        elif char == '"':
            in_quotes = not in_quotes
            continue
        elif char == "," and not in_quotes:
            fields.append("".join(current))
            current = []
            current_length = 0
            if len(fields) >= MAX_FIELDS_PER_LINE:
                raise ResourceLimitExceeded("field count", MAX_FIELDS_PER_LINE)
            continue

        current.append(char)
        current_length += 1
        # fail early instead of accumulating a huge field
        if current_length > MAX_FIELD_LENGTH:
            raise ResourceLimitExceeded("field length", MAX_FIELD_LENGTH)

    last = "".join(current)
    validate_field(last)
    fields.append(last)
    return fields

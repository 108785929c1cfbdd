"""
Structured content sniffer for timeline message fields.

Detects JSON or XML embedded in a field and returns a pretty-printed copy.
Guards run before any parser sees the text:
- Inputs over 1 MiB are returned as-is
- Any DOCTYPE or ENTITY declaration is returned as-is (entity expansion and
  external entity attacks)
- Angle-bracket nesting deeper than 100 is returned as-is
XML elements nested deeper than 100 levels are also left unformatted.
Formatted output over 2 MiB is discarded in favour of the original text.
"""
from __future__ import annotations

import json
import re
from typing import Any, Optional
from xml.dom import expatbuilder
from xml.dom.minidom import Node
from xml.parsers.expat import ExpatError, ParserCreate

from core.logging import get_logger

LOGGER = get_logger("core.timeline.sniffer")

MAX_PARSE_SIZE = 1024 * 1024            # 1 MiB of input characters
MAX_OUTPUT_SIZE = MAX_PARSE_SIZE * 2    # 2 MiB of formatted characters
MAX_XML_DEPTH = 100
JSON_INDENT = 4
XML_INDENT = "  "

_BLOCKED_MARKERS = ("<!entity", "<!doctype")
_XML_DECLARATION = re.compile(r"\s*(<\?xml\s[^>]*\?>)")


def is_safe_to_parse(text: str) -> bool:
    """Return True when ``text`` passes the size, declaration and nesting guards."""
    if len(text) > MAX_PARSE_SIZE:
        return False

    lowered = text.lower()
    if any(marker in lowered for marker in _BLOCKED_MARKERS):
        return False

    depth = 0
    for char in text:
        if char == "<":
            depth += 1
            if depth > MAX_XML_DEPTH:
                return False
        elif char == ">":
            depth = max(0, depth - 1)
    return True


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def format_json(text: str) -> Optional[str]:
    """Pretty-print a JSON object or array; None if ``text`` is not strict JSON."""
    try:
        document = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return None
    # Only containers count as structured content; bare scalars stay as typed
    if not isinstance(document, (dict, list)):
        return None
    return json.dumps(document, indent=JSON_INDENT, ensure_ascii=False)


class _TooDeep(Exception):
    pass


def _within_element_depth(text: str, max_depth: int) -> bool:
    """True if ``text`` is well-formed XML whose elements nest at most ``max_depth`` deep."""
    parser = ParserCreate()
    depth = 0

    def start(name: str, attributes: dict) -> None:
        nonlocal depth
        depth += 1
        if depth > max_depth:
            raise _TooDeep()

    def end(name: str) -> None:
        nonlocal depth
        depth -= 1

    parser.StartElementHandler = start
    parser.EndElementHandler = end
    try:
        parser.Parse(text, True)
    except _TooDeep:
        LOGGER.debug("XML nests deeper than %d elements, returning as-is", max_depth)
        return False
    except (ExpatError, ValueError):
        return False
    return True


def _strip_blank_text(node: Node) -> None:
    for child in list(node.childNodes):
        if child.nodeType == Node.TEXT_NODE and not child.data.strip():
            node.removeChild(child)
        elif child.hasChildNodes():
            _strip_blank_text(child)


def format_xml(text: str) -> Optional[str]:
    """Pretty-print an XML document with two-space indentation; None if not XML.

    A leading XML declaration is kept verbatim on its own line.
    """
    # the DOM helpers recurse once per level
    if not _within_element_depth(text, MAX_XML_DEPTH):
        return None
    try:
        # prefixes are kept verbatim; external entities are never fetched
        document = expatbuilder.parseString(text, namespaces=False)
    except (ExpatError, ValueError):
        return None
    try:
        _strip_blank_text(document)
        body = "".join(node.toprettyxml(indent=XML_INDENT) for node in document.childNodes)
    except RecursionError:
        return None
    finally:
        document.unlink()

    declaration = _XML_DECLARATION.match(text)
    if declaration:
        return f"{declaration.group(1)}\n{body}"
    return body


def format_if_applicable(text: str) -> str:
    """
    Return a pretty-printed copy of ``text`` if it is JSON or XML.

    Never raises: anything unsafe, unparseable or too large comes back unchanged.
    """
    if not is_safe_to_parse(text):
        LOGGER.debug("Content too large or potentially malicious for parsing, returning as-is")
        return text

    formatted = format_json(text)
    if formatted is None:
        formatted = format_xml(text)
    if formatted is None:
        return text

    if len(formatted) > MAX_OUTPUT_SIZE:
        LOGGER.debug("Formatted content too large (%d chars), returning original", len(formatted))
        return text
    return formatted

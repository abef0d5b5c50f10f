"""
Payload decoding for drain bodies: JSON document, JSON array, or NDJSON
"""
import json
import logging
import re
from typing import Any, List, Optional, Pattern

logger = logging.getLogger("drains")

# Surrogate escapes in the source text; paired ones decode to a single char
_SURROGATE_ESCAPE = re.compile(r"\\u[dD][89a-fA-F][0-9a-fA-F]{2}")
_LONE_SURROGATE = re.compile("[\ud800-\udfff]")
REPLACEMENT_CHAR = "\ufffd"


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not valid JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def _clean(text: str) -> str:
    return _LONE_SURROGATE.sub(REPLACEMENT_CHAR, text)


def scrub_surrogates(value: Any) -> Any:
    """
    Replace lone surrogates in every string (keys included) with U+FFFD.

    JSON allows escapes like "\\ud800" that decode to strings which cannot
    be encoded as UTF-8 by the database driver. Walks the value without
    recursion so depth is bounded only by what the decoder accepted.
    """
    root = [value]
    stack = [(root, 0)]
    while stack:
        container, key = stack.pop()
        item = container[key]
        if isinstance(item, str):
            container[key] = _clean(item)
        elif isinstance(item, list):
            stack.extend((item, i) for i in range(len(item)))
        elif isinstance(item, dict):
            cleaned = {_clean(k): v for k, v in item.items()}
            container[key] = cleaned
            stack.extend((cleaned, k) for k in cleaned)
    return root[0]


def _loads(text: str) -> Any:
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except RecursionError:
        raise ValueError("JSON nested too deeply")
    if _SURROGATE_ESCAPE.search(text):
        value = scrub_surrogates(value)
    return value


def is_binary_content_type(content_type: str, pattern: Optional[Pattern[str]]) -> bool:
    """True when the body should be stored as an opaque blob"""
    if pattern is None or not content_type:
        return False
    return pattern.search(content_type) is not None


def decode_text(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


def parse_json_or_ndjson(text: str) -> List[Any]:
    """
    Parse a drain body into a list of JSON values, one per event.

    The whole text is tried as a single JSON document first: an array
    yields its elements, any other value yields itself. If that fails the
    text is treated as NDJSON; blank lines are skipped and lines that do
    not parse are dropped.
    """
    if not text.strip():
        return []

    try:
        document = _loads(text)
    except ValueError:
        pass
    else:
        if isinstance(document, list):
            return document
        return [document]

    events = []
    dropped = 0
    for line in text.split("\n"):
        line = line.strip()
        if not line:
            continue
        try:
            events.append(_loads(line))
        except ValueError:
            dropped += 1

    if dropped:
        logger.debug("Dropped malformed NDJSON lines", extra={
            "component": "parser",
            "dropped": dropped,
            "parsed": len(events),
        })
    return events

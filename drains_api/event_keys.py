"""
Deterministic event ids used as the upsert conflict target.

Key layout: every part is rendered to text, the texts are joined with the
ASCII unit separator (0x1F), and the UTF-8 bytes are hashed with SHA-256.
Lone surrogates are encoded as-is (surrogatepass) rather than rejected.
Rendering rules:

    None            -> ""
    bool            -> "true" / "false"
    integral float  -> integer text ("2.0" -> "2")
    other float     -> repr()
    str             -> verbatim
    anything else   -> str()
"""
import hashlib
import json
from typing import Any, Iterable

SEPARATOR = "\x1f"


def _render(part: Any) -> str:
    if part is None:
        return ""
    if isinstance(part, bool):
        return "true" if part else "false"
    if isinstance(part, float):
        if part.is_integer():
            return str(int(part))
        return repr(part)
    if isinstance(part, str):
        return part
    return str(part)


def stable_event_id(parts: Iterable[Any]) -> str:
    joined = SEPARATOR.join(_render(p) for p in parts)
    return hashlib.sha256(joined.encode("utf-8", errors="surrogatepass")).hexdigest()


def content_hash(body: bytes) -> str:
    return hashlib.sha256(body).hexdigest()


def media_type(content_type: str) -> str:
    """'Application/JSON; charset=utf-8' -> 'application/json'"""
    return (content_type or "").split(";", 1)[0].strip().lower()


def canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)

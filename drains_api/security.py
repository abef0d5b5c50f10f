"""
Signature verification and secret comparison for drain requests
"""
import hashlib
import hmac
import os
from typing import Dict, Iterable, Union

REDACT_HEADERS = os.getenv(
    "REDACT_HEADERS", "authorization,x-vercel-signature,x-drains-token"
).lower().split(",")

SUPPORTED_ALGORITHMS = ("sha1", "sha256")

BytesLike = Union[str, bytes]


def _as_bytes(value: BytesLike) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def timing_safe_equal(a: BytesLike, b: BytesLike) -> bool:
    """
    Compare two secrets without an early exit on length or content.

    Both operands are padded to the longer length and compared with
    hmac.compare_digest; the length check is combined afterwards.
    """
    a_bytes = _as_bytes(a)
    b_bytes = _as_bytes(b)
    same_length = len(a_bytes) == len(b_bytes)
    longest = max(len(a_bytes), len(b_bytes))
    same_content = hmac.compare_digest(a_bytes.ljust(longest, b"\0"), b_bytes.ljust(longest, b"\0"))
    return same_content & same_length


def compute_signature(body: bytes, secret: str, algorithm: str = "sha1") -> str:
    """HMAC hex digest of the exact body bytes"""
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported signature algorithm: {algorithm}")
    return hmac.new(secret.encode("utf-8"), body, getattr(hashlib, algorithm)).hexdigest()


def verify_signature(body: bytes, signature_header: str, secret: str, algorithm: str = "sha1") -> bool:
    """Check a sender signature header against the body"""
    provided = (signature_header or "").strip().lower()
    # Accept "sha1=<hex>" style headers as well as bare hex
    prefix = f"{algorithm}="
    if provided.startswith(prefix):
        provided = provided[len(prefix):]
    if not provided:
        return False
    expected = compute_signature(body, secret, algorithm)
    return timing_safe_equal(provided, expected)


def redact_headers(headers: Dict[str, str], extra: Iterable[str] = ()) -> Dict[str, str]:
    """Redact sensitive headers, plus any configured header names in extra"""
    redacted = dict(headers)
    for header in list(REDACT_HEADERS) + list(extra):
        header_lower = header.strip().lower()
        for key in redacted:
            if key.lower() == header_lower:
                redacted[key] = "[REDACTED]"
    return redacted

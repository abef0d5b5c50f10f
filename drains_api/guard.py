"""
Admission control for drain endpoints.

Every drain request passes through ``guard_drain_request`` before any
parsing happens. The result is an ``AdmissionDecision``: either
``Admitted`` with the fully read body, or ``Rejected`` with the status the
handler must return. Rejections never carry a body; the reason is only
logged and counted.
"""

import logging
from typing import NamedTuple, Optional, Union

from fastapi import Request

from .config import DrainConfig, DrainSettings
from .security import timing_safe_equal, verify_signature
from .services.prometheus_metrics import prometheus_metrics

logger = logging.getLogger("drains")


class Admitted(NamedTuple):
    body: bytes
    content_type: str


class Rejected(NamedTuple):
    status: int
    reason: str


AdmissionDecision = Union[Admitted, Rejected]


def _reject(drain: DrainConfig, status: int, reason: str) -> Rejected:
    logger.warning("Drain request rejected", extra={
        "component": "guard",
        "event": "reject",
        "category": drain.category,
        "reason": reason,
        "status": status,
    })
    prometheus_metrics.increment_reject(drain.category, reason)
    return Rejected(status, reason)


def _declared_length(request: Request) -> Optional[int]:
    value = request.headers.get("content-length")
    if not value:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


async def read_body_capped(request: Request, max_bytes: int) -> Optional[bytes]:
    """Read the request body, giving up as soon as it grows past max_bytes"""
    chunks = []
    total = 0
    async for chunk in request.stream():
        if not chunk:
            continue
        total += len(chunk)
        if total > max_bytes:
            return None
        chunks.append(chunk)
    return b"".join(chunks)


async def guard_drain_request(
    request: Request,
    drain: DrainConfig,
    settings: DrainSettings,
) -> AdmissionDecision:
    """Decide whether a drain request is admitted"""
    # Disabled and unconfigured drains look exactly like missing routes
    if not settings.enabled:
        return _reject(drain, 404, "disabled")

    secret = drain.secret
    if not secret:
        return _reject(drain, 404, "no_secret")

    if settings.require_auth_header:
        token = settings.auth_token
        if not token:
            return _reject(drain, 404, "no_token_configured")
        provided = (request.headers.get(settings.auth_header_name) or "").strip()
        if not provided or not timing_safe_equal(provided, token):
            return _reject(drain, 404, "bad_token")

    signature_header = request.headers.get(settings.signature_header)
    if not signature_header:
        return _reject(drain, 401, "missing_signature")

    content_type = request.headers.get("content-type") or ""
    if drain.allowed_content_type is not None and content_type:
        if not drain.allowed_content_type.search(content_type):
            return _reject(drain, 415, "content_type")

    declared = _declared_length(request)
    if declared is not None and declared > settings.max_bytes:
        return _reject(drain, 413, "declared_size")

    body = await read_body_capped(request, settings.max_bytes)
    if body is None:
        return _reject(drain, 413, "size")

    if not verify_signature(body, signature_header, secret, settings.signature_algorithm):
        return _reject(drain, 401, "bad_signature")

    prometheus_metrics.observe_body_bytes(drain.category, len(body))
    return Admitted(body, content_type)

"""
Mapping from raw drain events to typed rows
"""
import base64
import math
from datetime import datetime, timezone
from typing import Any, Optional

from .event_keys import canonical_json, content_hash, media_type, stable_event_id
from .schemas.rows import SpeedInsightsRow, TraceRow


def get_string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def get_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            n = float(value)
        except OverflowError:
            return None
        return n if math.isfinite(n) else None
    if isinstance(value, str) and value.strip():
        try:
            n = float(value)
        except ValueError:
            return None
        return n if math.isfinite(n) else None
    return None


def _format_number(n: float) -> str:
    return str(int(n)) if n.is_integer() else repr(n)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO-8601 strings or epoch milliseconds, normalized to UTC"""
    if isinstance(value, str) and value:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        try:
            return parsed.astimezone(timezone.utc)
        except OverflowError:
            # Offset pushes the instant outside the datetime range
            return None

    n = get_number(value) if not isinstance(value, str) else None
    if n is not None:
        try:
            return datetime.fromtimestamp(n / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    return None


def iso_timestamp(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _device_id(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value or None
    n = get_number(value)
    return _format_number(n) if n is not None else None


def map_speed_insights_event(event: Any, received_at: Optional[datetime] = None) -> Optional[SpeedInsightsRow]:
    """Project a speed-insights event onto its row; non-objects map to None"""
    if not isinstance(event, dict):
        return None

    parsed_ts = parse_timestamp(event.get("timestamp"))
    key_ts = iso_timestamp(parsed_ts) if parsed_ts else ""
    timestamp = parsed_ts or received_at or datetime.now(timezone.utc)

    metric_type = get_string(event.get("metricType")) or "unknown"
    value = get_number(event.get("value"))
    value = 0.0 if value is None else value
    path = get_string(event.get("path"))
    route = get_string(event.get("route"))
    device_id = _device_id(event.get("deviceId"))

    event_id = get_string(event.get("eventId")) or stable_event_id(
        [key_ts, metric_type, value, path, route, device_id]
    )

    return SpeedInsightsRow(
        event_id=event_id,
        timestamp=timestamp,
        metric_type=metric_type,
        value=value,
        project_id=get_string(event.get("projectId")),
        owner_id=get_string(event.get("ownerId")),
        device_id=device_id,
        origin=get_string(event.get("origin")),
        path=path,
        route=route,
        country=get_string(event.get("country")),
        region=get_string(event.get("region")),
        city=get_string(event.get("city")),
        os_name=get_string(event.get("osName")),
        os_version=get_string(event.get("osVersion")),
        client_name=get_string(event.get("clientName")),
        client_type=get_string(event.get("clientType")),
        client_version=get_string(event.get("clientVersion")),
        device_type=get_string(event.get("deviceType")),
        device_brand=get_string(event.get("deviceBrand")),
        connection_speed=get_string(event.get("connectionSpeed")),
        browser_engine=get_string(event.get("browserEngine")),
        browser_engine_version=get_string(event.get("browserEngineVersion")),
        sdk_name=get_string(event.get("sdkName")),
        sdk_version=get_string(event.get("sdkVersion")),
        vercel_environment=get_string(event.get("vercelEnvironment")),
        vercel_url=get_string(event.get("vercelUrl")),
        deployment_id=get_string(event.get("deploymentId")),
        raw=event,
    )


def map_trace_event(event: Any, content_type: str) -> Optional[TraceRow]:
    if not isinstance(event, dict):
        return None
    event_id = stable_event_id([media_type(content_type), canonical_json(event)])
    return TraceRow(event_id=event_id, content_type=content_type, body_json=event)


def map_trace_blob(body: bytes, content_type: str) -> TraceRow:
    return TraceRow(
        event_id=content_hash(body),
        content_type=content_type,
        body_base64=base64.b64encode(body).decode("ascii"),
    )

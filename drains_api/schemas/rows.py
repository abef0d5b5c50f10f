from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class SpeedInsightsRow(BaseModel):
    event_id: str = Field(..., min_length=1, description="Dedup key")
    timestamp: datetime = Field(..., description="Sample time (UTC)")
    metric_type: str = Field("unknown", description="Web vital name, e.g. LCP")
    value: float = Field(0.0, description="Metric value")
    project_id: Optional[str] = None
    owner_id: Optional[str] = None
    device_id: Optional[str] = None
    origin: Optional[str] = None
    path: Optional[str] = None
    route: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    os_name: Optional[str] = None
    os_version: Optional[str] = None
    client_name: Optional[str] = None
    client_type: Optional[str] = None
    client_version: Optional[str] = None
    device_type: Optional[str] = None
    device_brand: Optional[str] = None
    connection_speed: Optional[str] = None
    browser_engine: Optional[str] = None
    browser_engine_version: Optional[str] = None
    sdk_name: Optional[str] = None
    sdk_version: Optional[str] = None
    vercel_environment: Optional[str] = None
    vercel_url: Optional[str] = None
    deployment_id: Optional[str] = None
    raw: Dict[str, Any] = Field(..., description="Original event, verbatim")


class TraceRow(BaseModel):
    """A trace event (JSON) or an opaque trace blob (binary)"""
    event_id: str = Field(..., min_length=1, description="Dedup key")
    content_type: str = Field("", description="Declared content type")
    body_json: Optional[Dict[str, Any]] = Field(None, description="Original event, verbatim")
    body_base64: Optional[str] = Field(None, description="Raw body for binary payloads")

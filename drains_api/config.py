"""
Configuration module for Drains API
"""

import os
import re
from pathlib import Path
from typing import Literal, Mapping, Optional, Pattern

from pydantic import BaseModel, ConfigDict, Field

TRUTHY = ("true", "1", "yes", "on")


def env_bool(key: str, default: bool = False, environ: Optional[Mapping[str, str]] = None) -> bool:
    """Get boolean value from environment variable"""
    env = os.environ if environ is None else environ
    value = env.get(key)
    if value is None or value == "":
        return default
    return value.strip().lower() in TRUTHY


def env_int(key: str, default: int, environ: Optional[Mapping[str, str]] = None) -> int:
    env = os.environ if environ is None else environ
    try:
        return int(env.get(key, default))
    except (TypeError, ValueError):
        return default


def _read_version_from_repo(default: str = "dev") -> str:
    try:
        version_file = Path(__file__).resolve().parents[1] / "VERSION"
        v = version_file.read_text(encoding="utf-8").strip()
        if v:
            return v
    except OSError:
        pass
    return os.getenv("APP_VERSION", default)


API_VERSION = _read_version_from_repo()

# API configuration
API_PREFIX = "/v1"
DRAINS_PREFIX = "/drains"

# Database configuration
SQLITE_PATH = os.getenv("SQLITE_PATH", "./drains.db")
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{SQLITE_PATH}")

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")

# Drain defaults
DEFAULT_MAX_BYTES = 5_000_000
DEFAULT_BATCH_SIZE = 500
DEFAULT_AUTH_HEADER_NAME = "x-drains-token"
DEFAULT_SIGNATURE_HEADER = "x-vercel-signature"
DEFAULT_SIGNATURE_ALGORITHM = "sha1"

METRICS_CONTENT_TYPES = re.compile(r"json|ndjson|text/plain", re.IGNORECASE)
TRACES_CONTENT_TYPES = re.compile(r"protobuf|octet-stream|json|ndjson|text/plain", re.IGNORECASE)
TRACES_BINARY_CONTENT_TYPES = re.compile(r"protobuf|octet-stream", re.IGNORECASE)


class DrainConfig(BaseModel):
    """Per-category drain settings"""

    model_config = ConfigDict(frozen=True)

    category: str
    table: str
    secret: Optional[str] = None
    allowed_content_type: Optional[Pattern[str]] = None
    binary_content_type: Optional[Pattern[str]] = None


class DrainSettings(BaseModel):
    """Settings shared by every drain, built once at startup"""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    auth_token: Optional[str] = None
    auth_header_name: str = DEFAULT_AUTH_HEADER_NAME
    require_auth_header: bool = True
    signature_header: str = DEFAULT_SIGNATURE_HEADER
    signature_algorithm: Literal["sha1", "sha256"] = DEFAULT_SIGNATURE_ALGORITHM
    max_bytes: int = Field(DEFAULT_MAX_BYTES, gt=0)
    batch_size: int = Field(DEFAULT_BATCH_SIZE, ge=1)
    metrics: DrainConfig = DrainConfig(
        category="metrics",
        table="speed_insights_events",
        allowed_content_type=METRICS_CONTENT_TYPES,
    )
    traces: DrainConfig = DrainConfig(
        category="traces",
        table="trace_events",
        allowed_content_type=TRACES_CONTENT_TYPES,
        binary_content_type=TRACES_BINARY_CONTENT_TYPES,
    )


def should_enable_ingest(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Ingest runs only in production or when explicitly allowed elsewhere"""
    env = os.environ if environ is None else environ
    environment = (env.get("DRAINS_ENVIRONMENT") or "").strip().lower()
    if environment == "production":
        return True
    return env_bool("DRAINS_ALLOW_NON_PROD", False, env)


def _optional(env: Mapping[str, str], key: str) -> Optional[str]:
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> DrainSettings:
    """Read drain settings from the environment"""
    env = os.environ if environ is None else environ
    defaults = DrainSettings()
    return DrainSettings(
        enabled=should_enable_ingest(env),
        auth_token=_optional(env, "DRAINS_AUTH_TOKEN"),
        auth_header_name=(_optional(env, "DRAINS_AUTH_HEADER_NAME") or DEFAULT_AUTH_HEADER_NAME).lower(),
        require_auth_header=env_bool("DRAINS_REQUIRE_AUTH_HEADER", True, env),
        signature_header=(_optional(env, "DRAINS_SIGNATURE_HEADER") or DEFAULT_SIGNATURE_HEADER).lower(),
        signature_algorithm=(_optional(env, "DRAINS_SIGNATURE_ALGORITHM") or DEFAULT_SIGNATURE_ALGORITHM).lower(),
        max_bytes=env_int("DRAINS_MAX_BYTES", DEFAULT_MAX_BYTES, env),
        batch_size=env_int("DRAINS_BATCH_SIZE", DEFAULT_BATCH_SIZE, env),
        metrics=defaults.metrics.model_copy(update={"secret": _optional(env, "DRAINS_METRICS_SECRET")}),
        traces=defaults.traces.model_copy(update={"secret": _optional(env, "DRAINS_TRACES_SECRET")}),
    )

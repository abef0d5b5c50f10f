"""
Shared helpers for drain tests
"""
import json
from typing import Dict, Iterable, List, Optional

from starlette.requests import Request

from drains_api.security import compute_signature
from drains_api.store import EventStore, StoreError

METRICS_SECRET = "metrics-secret-1234"
TRACES_SECRET = "traces-secret-5678"
AUTH_TOKEN = "drain-token-abcdef"

TEST_ENV = {
    "DRAINS_ENVIRONMENT": "production",
    "DRAINS_METRICS_SECRET": METRICS_SECRET,
    "DRAINS_TRACES_SECRET": TRACES_SECRET,
    "DRAINS_AUTH_TOKEN": AUTH_TOKEN,
}


def drain_headers(body: bytes, secret: str, content_type: Optional[str] = "application/json",
                  token: Optional[str] = AUTH_TOKEN) -> Dict[str, str]:
    headers = {"x-vercel-signature": compute_signature(body, secret)}
    if content_type is not None:
        headers["content-type"] = content_type
    if token is not None:
        headers["x-drains-token"] = token
    return headers


def metric_event(n: int = 0, **overrides) -> dict:
    event = {
        "schema": "vercel.speed_insights.v1",
        "timestamp": "2026-10-01T12:00:00.000Z",
        "projectId": "prj_123",
        "ownerId": "team_abc",
        "deviceId": 1000 + n,
        "metricType": "LCP",
        "value": 1200.5 + n,
        "origin": "https://example.com",
        "path": f"/page/{n}",
        "route": "/page/[id]",
        "country": "DE",
        "osName": "Mac OS",
        "clientName": "Chrome",
        "sdkName": "@vercel/speed-insights",
        "sdkVersion": "1.0.0",
        "vercelEnvironment": "production",
    }
    event.update(overrides)
    return event


def ndjson(events: Iterable[dict]) -> bytes:
    return "\n".join(json.dumps(e) for e in events).encode("utf-8")


class RecordingStore(EventStore):
    """EventStore that remembers batch sizes and can fail on a given batch"""

    def __init__(self, engine, fail_on_batch: Optional[int] = None):
        super().__init__(engine)
        self.batches: List[int] = []
        self.fail_on_batch = fail_on_batch

    def upsert_batch(self, table, rows):
        if self.fail_on_batch is not None and len(self.batches) == self.fail_on_batch:
            self.batches.append(-len(rows))
            raise StoreError("simulated store outage", table=table)
        self.batches.append(len(rows))
        super().upsert_batch(table, rows)


class StreamedRequest:
    """Builds a starlette Request whose body arrives in chunks"""

    def __init__(self, headers: Dict[str, str], chunks: Iterable[bytes] = (b"",), path: str = "/drains/metrics"):
        chunks = list(chunks) or [b""]
        self.pending = [
            {"type": "http.request", "body": c, "more_body": i < len(chunks) - 1}
            for i, c in enumerate(chunks)
        ]
        self.total_chunks = len(self.pending)
        scope = {
            "type": "http",
            "method": "POST",
            "path": path,
            "headers": [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers.items()],
            "query_string": b"",
        }
        self.request = Request(scope, self._receive)

    async def _receive(self):
        if self.pending:
            return self.pending.pop(0)
        return {"type": "http.disconnect"}

    @property
    def chunks_read(self) -> int:
        return self.total_chunks - len(self.pending)

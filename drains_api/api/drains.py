"""
Drain endpoints: speed-insights metrics and traces.

Only POST ingests. Every other method answers 404 with no body, and every
POST answers with a bare status code.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from ..config import DRAINS_PREFIX, DrainConfig
from ..guard import Rejected, guard_drain_request
from ..mapping import map_speed_insights_event, map_trace_blob, map_trace_event
from ..parsing import decode_text, is_binary_content_type, parse_json_or_ndjson
from ..services.prometheus_metrics import prometheus_metrics
from ..store import StoreError, upsert_rows

router = APIRouter(prefix=DRAINS_PREFIX, include_in_schema=False)
logger = logging.getLogger("drains")

METRICS_PATHS = ("/metrics", "/speed-insights")
TRACES_PATHS = ("/traces",)
PROBE_METHODS = ["GET", "HEAD", "OPTIONS"]


def _empty(status: int) -> Response:
    return Response(status_code=status)


def collect_rows(events: Iterable[Any], mapper: Callable[[Any], Optional[BaseModel]]) -> Tuple[Dict[str, BaseModel], int]:
    """
    Map events to rows keyed by event_id.

    Later events replace earlier ones with the same id. Returns the map and
    the number of collapsed duplicates.
    """
    rows: Dict[str, BaseModel] = {}
    duplicates = 0
    for event in events:
        row = mapper(event)
        if row is None:
            continue
        if row.event_id in rows:
            duplicates += 1
        rows[row.event_id] = row
    return rows, duplicates


async def _persist(request: Request, drain: DrainConfig, rows: List[BaseModel]) -> Response:
    settings = request.app.state.settings
    store = request.app.state.store
    payload = [row.model_dump() for row in rows]
    try:
        batches = await run_in_threadpool(upsert_rows, store, drain.table, payload, settings.batch_size)
    except StoreError as e:
        logger.error("Drain insert failed", exc_info=True, extra={
            "component": "drains",
            "category": drain.category,
            "table": drain.table,
            "batch_index": e.batch_index,
            "rows": len(payload),
        })
        prometheus_metrics.increment_store_errors(drain.category)
        return _empty(500)

    prometheus_metrics.increment_batches_written(drain.category, batches)
    prometheus_metrics.increment_events_ingested(drain.category, len(payload))
    logger.info("Drain events stored", extra={
        "component": "drains",
        "category": drain.category,
        "rows": len(payload),
        "batches": batches,
    })
    return _empty(204)


async def ingest_drain(
    request: Request,
    drain: DrainConfig,
    mapper: Callable[[Any, str], Optional[BaseModel]],
) -> Response:
    """Guard, decode, map, dedupe and store one drain delivery"""
    settings = request.app.state.settings
    prometheus_metrics.increment_drain_requests(drain.category)

    decision = await guard_drain_request(request, drain, settings)
    if isinstance(decision, Rejected):
        return _empty(decision.status)
    body, content_type = decision

    if is_binary_content_type(content_type, drain.binary_content_type):
        blob = map_trace_blob(body, content_type)
        return await _persist(request, drain, [blob])

    events = parse_json_or_ndjson(decode_text(body))
    if not events:
        return _empty(204)

    rows, duplicates = collect_rows(events, lambda event: mapper(event, content_type))
    prometheus_metrics.increment_duplicates(drain.category, duplicates)
    if not rows:
        return _empty(204)
    return await _persist(request, drain, list(rows.values()))


async def post_metrics(request: Request) -> Response:
    received_at = datetime.now(timezone.utc)

    def map_metric(event: Any, content_type: str):
        return map_speed_insights_event(event, received_at=received_at)

    return await ingest_drain(request, request.app.state.settings.metrics, map_metric)


async def post_traces(request: Request) -> Response:
    return await ingest_drain(request, request.app.state.settings.traces, map_trace_event)


async def not_found() -> Response:
    return _empty(404)


for _path in METRICS_PATHS:
    router.add_api_route(_path, post_metrics, methods=["POST"])
    router.add_api_route(_path, not_found, methods=PROBE_METHODS)

for _path in TRACES_PATHS:
    router.add_api_route(_path, post_traces, methods=["POST"])
    router.add_api_route(_path, not_found, methods=PROBE_METHODS)

"""
Tests for idempotent batch persistence
"""

from datetime import datetime, timezone

import pytest

from drains_api.mapping import map_speed_insights_event, map_trace_blob
from drains_api.store import EventStore, StoreError, chunk, upsert_rows
from tests.helpers import RecordingStore, metric_event

METRICS_TABLE = "speed_insights_events"
TRACES_TABLE = "trace_events"
RECEIVED = datetime(2026, 10, 16, tzinfo=timezone.utc)


def metric_rows(count, **overrides):
    return [
        map_speed_insights_event(metric_event(n, **overrides), received_at=RECEIVED).model_dump()
        for n in range(count)
    ]


class TestChunk:
    def test_even_split(self):
        assert list(chunk([1, 2, 3, 4], 2)) == [[1, 2], [3, 4]]

    def test_remainder(self):
        assert [len(c) for c in chunk(list(range(1001)), 500)] == [500, 500, 1]

    def test_empty(self):
        assert list(chunk([], 3)) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            list(chunk([1], 0))


class TestEventStore:
    def test_insert_and_get(self, engine):
        store = EventStore(engine)
        rows = metric_rows(2)
        store.upsert_batch(METRICS_TABLE, rows)

        assert store.count(METRICS_TABLE) == 2
        stored = store.get(METRICS_TABLE, rows[0]["event_id"])
        assert stored["metric_type"] == "LCP"
        assert stored["value"] == 1200.5
        assert stored["raw"] == rows[0]["raw"]
        assert stored["received_at"] is not None

    def test_conflict_replaces_row(self, engine):
        store = EventStore(engine)
        first = metric_rows(1, eventId="evt_1")
        second = metric_rows(1, eventId="evt_1", value=99.0, country="FR")
        store.upsert_batch(METRICS_TABLE, first)
        store.upsert_batch(METRICS_TABLE, second)

        assert store.count(METRICS_TABLE) == 1
        stored = store.get(METRICS_TABLE, "evt_1")
        assert stored["value"] == 99.0
        assert stored["country"] == "FR"
        assert stored["raw"]["country"] == "FR"

    def test_empty_batch_is_noop(self, engine):
        store = EventStore(engine)
        store.upsert_batch(METRICS_TABLE, [])
        assert store.count(METRICS_TABLE) == 0

    def test_trace_blob(self, engine):
        store = EventStore(engine)
        row = map_trace_blob(b"\x01\x02\x03", "application/x-protobuf").model_dump()
        store.upsert_batch(TRACES_TABLE, [row])
        store.upsert_batch(TRACES_TABLE, [row])

        assert store.count(TRACES_TABLE) == 1
        stored = store.get(TRACES_TABLE, row["event_id"])
        assert stored["body_base64"] == row["body_base64"]
        assert stored["content_type"] == "application/x-protobuf"

    def test_get_missing(self, engine):
        assert EventStore(engine).get(METRICS_TABLE, "nope") is None

    def test_unknown_table(self, engine):
        with pytest.raises(StoreError):
            EventStore(engine).upsert_batch("nope", [{"event_id": "x"}])

    def test_database_error_becomes_store_error(self, engine):
        store = EventStore(engine)
        rows = metric_rows(1)
        rows[0]["metric_type"] = None
        with pytest.raises(StoreError) as exc_info:
            store.upsert_batch(METRICS_TABLE, rows)
        assert exc_info.value.table == METRICS_TABLE


class TestUpsertRows:
    def test_batches(self, engine):
        store = RecordingStore(engine)
        written = upsert_rows(store, METRICS_TABLE, metric_rows(7), batch_size=3)

        assert written == 3
        assert store.batches == [3, 3, 1]
        assert store.count(METRICS_TABLE) == 7

    def test_no_rows_no_batches(self, engine):
        store = RecordingStore(engine)
        assert upsert_rows(store, METRICS_TABLE, [], batch_size=3) == 0
        assert store.batches == []

    def test_failure_keeps_earlier_batches(self, engine):
        store = RecordingStore(engine, fail_on_batch=1)
        with pytest.raises(StoreError) as exc_info:
            upsert_rows(store, METRICS_TABLE, metric_rows(7), batch_size=3)

        assert exc_info.value.batch_index == 1
        assert store.batches == [3, -3]
        assert store.count(METRICS_TABLE) == 3

"""
Idempotent persistence of drain rows.

Rows are written in fixed-size batches with "insert or replace on
event_id conflict" semantics. Each batch is its own transaction: when a
batch fails, earlier batches stay committed and the failure is raised as
``StoreError`` so the exporter retries the whole delivery.
"""
import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models.speed_insights_event import SpeedInsightsEvent
from .models.trace_event import TraceEvent

logger = logging.getLogger("drains")

T = TypeVar("T")

MODELS = {
    SpeedInsightsEvent.__tablename__: SpeedInsightsEvent,
    TraceEvent.__tablename__: TraceEvent,
}

CONFLICT_KEY = "event_id"


class StoreError(Exception):
    """A batch could not be written"""

    def __init__(self, message: str, table: str = "", batch_index: int = -1):
        super().__init__(message)
        self.table = table
        self.batch_index = batch_index


def chunk(items: Sequence[T], size: int) -> Iterator[List[T]]:
    if size < 1:
        raise ValueError("batch size must be >= 1")
    for i in range(0, len(items), size):
        yield list(items[i:i + size])


class EventStore:
    """Upsert and read access to the drain tables"""

    def __init__(self, engine: Engine):
        self.engine = engine

    def _model(self, table: str):
        try:
            return MODELS[table]
        except KeyError:
            raise StoreError(f"Unknown drain table: {table}", table=table)

    def upsert_batch(self, table: str, rows: List[Dict[str, Any]]) -> None:
        """Write one batch in a single transaction, replacing rows on conflict"""
        if not rows:
            return
        model = self._model(table)
        dialect = self.engine.dialect.name
        try:
            if dialect in ("postgresql", "sqlite"):
                insert = pg_insert if dialect == "postgresql" else sqlite_insert
                stmt = insert(model.__table__)
                update_cols = {
                    name: stmt.excluded[name] for name in rows[0] if name != CONFLICT_KEY
                }
                update_cols["received_at"] = func.now()
                stmt = stmt.on_conflict_do_update(index_elements=[CONFLICT_KEY], set_=update_cols)
                with self.engine.begin() as conn:
                    conn.execute(stmt, rows)
            else:
                with Session(self.engine) as session, session.begin():
                    for row in rows:
                        session.merge(model(**row))
        except SQLAlchemyError as e:
            raise StoreError(str(e), table=table) from e

    def get(self, table: str, event_id: str) -> Optional[Dict[str, Any]]:
        model = self._model(table)
        with Session(self.engine) as session:
            obj = session.get(model, event_id)
            if obj is None:
                return None
            return {c.name: getattr(obj, c.name) for c in model.__table__.columns}

    def count(self, table: str) -> int:
        model = self._model(table)
        with Session(self.engine) as session:
            return session.execute(select(func.count()).select_from(model)).scalar_one()


def upsert_rows(store: EventStore, table: str, rows: Sequence[Dict[str, Any]], batch_size: int) -> int:
    """
    Persist rows batch by batch; returns the number of batches written.

    Stops at the first failing batch and raises StoreError with its index.
    """
    written = 0
    for index, batch in enumerate(chunk(rows, batch_size)):
        try:
            store.upsert_batch(table, batch)
        except StoreError as e:
            e.batch_index = index
            logger.error("Drain batch write failed", extra={
                "component": "store",
                "table": table,
                "batch_index": index,
                "batch_rows": len(batch),
                "committed_batches": written,
                "error": str(e),
            })
            raise
        written += 1
    return written

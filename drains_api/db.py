"""
Database configuration and session management
"""
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from .config import DATABASE_URL

logger = logging.getLogger("drains")

# Create base class for models
Base = declarative_base()


def make_engine(url: str = DATABASE_URL) -> Engine:
    # SQLite needs special connect args; Postgres does not
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)


# Create engine
engine = make_engine(DATABASE_URL)


def init_db(bind: Engine = None) -> None:
    """Create drain tables if they do not exist"""
    # Make sure all models are imported so Base.metadata is populated
    from .models import speed_insights_event, trace_event  # noqa: F401

    target = bind if bind is not None else engine
    Base.metadata.create_all(bind=target)
    logger.info("Database tables created successfully", extra={
        "component": "db",
        "dialect": target.dialect.name,
    })

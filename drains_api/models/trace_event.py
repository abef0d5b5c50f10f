from sqlalchemy import Column, DateTime, JSON, String, Text, func

from drains_api.db import Base


class TraceEvent(Base):
    __tablename__ = "trace_events"

    event_id = Column(String, primary_key=True)
    content_type = Column(String, nullable=False, default="")
    body_json = Column(JSON)  # JSON payloads
    body_base64 = Column(Text)  # protobuf and other binary payloads
    received_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

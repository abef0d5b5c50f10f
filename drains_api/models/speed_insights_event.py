from sqlalchemy import Column, DateTime, Float, Index, JSON, String, func

from drains_api.db import Base


class SpeedInsightsEvent(Base):
    __tablename__ = "speed_insights_events"

    event_id = Column(String, primary_key=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    metric_type = Column(String, nullable=False)
    value = Column(Float, nullable=False)
    project_id = Column(String)
    owner_id = Column(String)
    device_id = Column(String)
    origin = Column(String)
    path = Column(String)
    route = Column(String)
    country = Column(String)
    region = Column(String)
    city = Column(String)
    os_name = Column(String)
    os_version = Column(String)
    client_name = Column(String)
    client_type = Column(String)
    client_version = Column(String)
    device_type = Column(String)
    device_brand = Column(String)
    connection_speed = Column(String)
    browser_engine = Column(String)
    browser_engine_version = Column(String)
    sdk_name = Column(String)
    sdk_version = Column(String)
    vercel_environment = Column(String)
    vercel_url = Column(String)
    deployment_id = Column(String)
    raw = Column(JSON, nullable=False)  # original event, verbatim
    received_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_speed_insights_timestamp", "timestamp"),
        Index("idx_speed_insights_metric_type", "metric_type"),
    )

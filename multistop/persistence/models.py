"""SQLAlchemy models for navigation history persistence."""
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from multistop.persistence.db import Base
import uuid
from datetime import datetime


def _new_id() -> str:
    return str(uuid.uuid4())


class HistoryRecordModel(Base):
    """Navigation history record database model."""
    __tablename__ = "navigation_history"

    id = Column(String(36), primary_key=True, default=_new_id)
    route_description = Column(Text, nullable=False, default="")
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False)
    start_latitude = Column(Float, nullable=True)
    start_longitude = Column(Float, nullable=True)
    total_distance = Column(Float, default=0.0)
    estimated_duration = Column(Integer, default=0)
    actual_duration = Column(Integer, nullable=True)
    alarms_triggered = Column(Integer, default=0)
    completed_stops = Column(Integer, default=0)
    total_stops = Column(Integer, default=0)
    user_id = Column(String(255), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.now)

    # Relationships
    destinations = relationship(
        "HistoryDestinationModel",
        back_populates="record",
        cascade="all, delete-orphan",
        order_by="HistoryDestinationModel.sequence"
    )


class HistoryDestinationModel(Base):
    """Destination outcome database model."""
    __tablename__ = "navigation_destinations"

    id = Column(String(36), primary_key=True, default=_new_id)
    record_id = Column(String(36), ForeignKey("navigation_history.id"), nullable=False)
    sequence = Column(Integer, nullable=False)
    name = Column(String(255), nullable=False, default="")
    address = Column(String(500), nullable=False, default="")
    latitude = Column(Float, nullable=False, default=0.0)
    longitude = Column(Float, nullable=False, default=0.0)
    stop_order = Column(Integer, nullable=False, default=0)
    is_completed = Column(Boolean, default=False)
    arrival_time = Column(DateTime, nullable=True)
    alarm_triggered = Column(Boolean, default=False)

    # Relationships
    record = relationship("HistoryRecordModel", back_populates="destinations")

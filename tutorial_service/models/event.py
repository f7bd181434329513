# SQLAlchemy models

from sqlalchemy import Column, String, DateTime, Float, Uuid
from tutorial_service.models.base import Base
import uuid


class EventRow(Base):
    """
    Time-ordered events partitioned by type.

    The composite key (type, start_time, event_id) doubles as the
    clustering index; readers order by start_time descending.
    """

    __tablename__ = "events"

    type = Column(String, primary_key=True)
    start_time = Column(DateTime, primary_key=True)
    event_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    value = Column(Float, nullable=False)

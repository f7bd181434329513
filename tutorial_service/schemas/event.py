# Pydantic schemas

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
from uuid import UUID


class Event(BaseModel):
    """Response schema for a stored event"""

    id: UUID
    type: str
    start_time: datetime
    value: float

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_serializer('start_time')
    def serialize_start_time(self, value: datetime) -> str:
        # Stored timestamps are naive UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()

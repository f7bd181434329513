from pydantic import BaseModel
from uuid import UUID


class Location(BaseModel):
    """Static demo value, never persisted"""

    id: UUID
    street: str
    country: str

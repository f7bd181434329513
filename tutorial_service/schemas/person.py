# Pydantic schemas

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from uuid import UUID


class PersonCreate(BaseModel):
    """Schema for creating or replacing a person; any supplied id is ignored"""

    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    country: str = Field(..., min_length=1, max_length=255)
    age: int = Field(..., ge=0)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator('first_name', 'last_name', 'country')
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError('Field cannot be empty or whitespace')
        return v.strip()

    def with_id(self, person_id: UUID) -> "Person":
        return Person(id=person_id, **self.model_dump())


class Person(BaseModel):
    """A person as exposed by the API and returned by the managers"""

    id: UUID
    first_name: str
    last_name: str
    country: str
    age: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

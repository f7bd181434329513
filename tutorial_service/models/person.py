# SQLAlchemy models

from sqlalchemy import Column, String, Integer, Uuid
from tutorial_service.models.base import Base
import uuid


class PersonRow(Base):
    """Primary table, addressed by person id"""

    __tablename__ = "people"

    person_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    country = Column(String, nullable=False)
    age = Column(Integer, nullable=False)


class PersonByCountryRow(Base):
    """
    Secondary index table partitioned by country.

    Every key column is part of the primary key, so a change to any of them
    is a delete of the old row plus an insert of the new one.
    """

    __tablename__ = "people_by_country"

    country = Column(String, primary_key=True)
    first_name = Column(String, primary_key=True)
    last_name = Column(String, primary_key=True)
    person_id = Column(Uuid, primary_key=True)
    age = Column(Integer, nullable=False)

import asyncio
from uuid import UUID
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tutorial_service.core.database import upsert
from tutorial_service.core.errors import StoreError
from tutorial_service.models.person import PersonRow, PersonByCountryRow
from tutorial_service.schemas.person import Person, PersonCreate
import structlog

logger = structlog.get_logger()


def to_person(row: PersonRow | PersonByCountryRow) -> Person:
    """Both tables carry every person column, so either row maps directly"""
    return Person(
        id=row.person_id,
        first_name=row.first_name,
        last_name=row.last_name,
        country=row.country,
        age=row.age
    )


def to_person_row(person: Person) -> dict:
    return {
        "person_id": person.id,
        "first_name": person.first_name,
        "last_name": person.last_name,
        "country": person.country,
        "age": person.age
    }


def country_key(person: Person) -> dict:
    """Primary key of the person's people_by_country row"""
    return {
        "country": person.country,
        "first_name": person.first_name,
        "last_name": person.last_name,
        "person_id": person.id
    }


def to_person_by_country_row(person: Person) -> dict:
    return {**country_key(person), "age": person.age}


class PersonManager:
    """
    Keeps the people table and the people_by_country index consistent.

    Each table write runs in its own transaction. The writes of one
    operation are issued together and awaited together; a failure in any
    of them raises StoreError without undoing the others (best-effort
    dual-write, no atomicity across tables).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_all(self) -> list[Person]:
        stmt = select(PersonByCountryRow).order_by(
            PersonByCountryRow.country,
            PersonByCountryRow.first_name,
            PersonByCountryRow.last_name,
            PersonByCountryRow.person_id
        )
        rows = await self._read("find_all", stmt)
        return [to_person(row) for row in rows]

    async def find_all_by_country(self, country: str) -> list[Person]:
        stmt = (
            select(PersonByCountryRow)
            .where(PersonByCountryRow.country == country)
            .order_by(
                PersonByCountryRow.first_name,
                PersonByCountryRow.last_name,
                PersonByCountryRow.person_id
            )
        )
        rows = await self._read("find_all_by_country", stmt)
        return [to_person(row) for row in rows]

    async def find_by_id(self, person_id: UUID) -> Person | None:
        """Read the primary table; None means the person does not exist"""
        stmt = select(PersonRow).where(PersonRow.person_id == person_id)
        rows = await self._read("find_by_id", stmt)
        if not rows:
            return None
        return to_person(rows[0])

    async def save(self, person: Person) -> Person:
        await self._dual_write(
            "save",
            self._upsert(PersonRow, to_person_row(person)),
            self._upsert(PersonByCountryRow, to_person_by_country_row(person))
        )

        logger.info("person_saved", person_id=str(person.id), country=person.country)
        return person

    async def update(self, old: Person, updated: Person) -> Person:
        """
        Upsert the primary row and move the index row if its key changed.

        The new index row is always written; the old one is only deleted
        when its key differs, so an unchanged key is never deleted and
        re-inserted concurrently.
        """
        writes = [
            self._upsert(PersonRow, to_person_row(updated)),
            self._upsert(PersonByCountryRow, to_person_by_country_row(updated))
        ]
        if country_key(old) != country_key(updated):
            writes.append(self._delete(PersonByCountryRow, country_key(old)))

        await self._dual_write("update", *writes)

        logger.info(
            "person_updated",
            person_id=str(updated.id),
            old_country=old.country,
            country=updated.country
        )
        return updated

    async def replace(self, person_id: UUID, changes: PersonCreate) -> Person | None:
        """Update an existing person; returns None rather than creating one"""
        old = await self.find_by_id(person_id)
        if old is None:
            logger.info("person_not_found", person_id=str(person_id), operation="replace")
            return None
        return await self.update(old, changes.with_id(person_id))

    async def delete(self, person: Person) -> None:
        await self._dual_write(
            "delete",
            self._delete(PersonRow, {"person_id": person.id}),
            self._delete(PersonByCountryRow, country_key(person))
        )

        logger.info("person_deleted", person_id=str(person.id), country=person.country)

    async def _read(self, operation: str, stmt) -> list:
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("store_read_failed", operation=operation, error=str(e))
            raise StoreError(operation, [e]) from e

    async def _upsert(self, model, values: dict):
        async with self.session_factory() as session:
            async with session.begin():
                await session.execute(upsert(session, model, values))

    async def _delete(self, model, key: dict):
        async with self.session_factory() as session:
            async with session.begin():
                await session.execute(delete(model).filter_by(**key))

    async def _dual_write(self, operation: str, *writes):
        # Issued writes run to completion even if the caller is cancelled
        pending = asyncio.gather(*writes, return_exceptions=True)
        results = await asyncio.shield(pending)

        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            for failure in failures:
                logger.error(
                    "dual_write_failed",
                    operation=operation,
                    issued=len(results),
                    failed=len(failures),
                    error=str(failure)
                )
            raise StoreError(operation, failures) from failures[0]

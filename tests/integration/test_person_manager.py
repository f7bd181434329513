import asyncio
import pytest
from types import SimpleNamespace
from uuid import uuid4

from tutorial_service.core.database import async_engine, upsert
from tutorial_service.core.errors import StoreError
from tutorial_service.models.person import PersonByCountryRow, PersonRow
from tutorial_service.schemas.person import Person, PersonCreate


def make_person(**overrides) -> Person:
    fields = {"id": uuid4(), "first_name": "John", "last_name": "Doe", "country": "UK", "age": 50}
    fields.update(overrides)
    return Person(**fields)


async def drop_country_index():
    async with async_engine.begin() as conn:
        await conn.run_sync(PersonByCountryRow.__table__.drop)


@pytest.mark.asyncio
async def test_save_then_find_by_id(person_manager):
    person = make_person()

    saved = await person_manager.save(person)

    assert saved == person
    assert await person_manager.find_by_id(person.id) == person


@pytest.mark.asyncio
async def test_find_by_id_missing_returns_none(person_manager):
    assert await person_manager.find_by_id(uuid4()) is None


@pytest.mark.asyncio
async def test_save_writes_exactly_one_index_row(person_manager):
    person = make_person()
    await person_manager.save(person)

    by_country = await person_manager.find_all_by_country("UK")

    assert by_country == [person]


@pytest.mark.asyncio
async def test_find_all_by_country_only_returns_that_country(person_manager):
    uk = make_person(first_name="Alice")
    other_uk = make_person(first_name="Bob")
    us = make_person(country="US")
    for person in (uk, other_uk, us):
        await person_manager.save(person)

    assert await person_manager.find_all_by_country("UK") == [uk, other_uk]
    assert await person_manager.find_all_by_country("US") == [us]
    assert await person_manager.find_all_by_country("FR") == []
    assert len(await person_manager.find_all()) == 3


@pytest.mark.asyncio
async def test_update_with_changed_country_moves_index_row(person_manager):
    old = make_person()
    await person_manager.save(old)
    updated = old.model_copy(update={"country": "US", "age": 51})

    await person_manager.update(old, updated)

    assert await person_manager.find_all_by_country("UK") == []
    assert await person_manager.find_all_by_country("US") == [updated]
    assert await person_manager.find_by_id(old.id) == updated


@pytest.mark.asyncio
async def test_update_with_unchanged_key_keeps_index_row(person_manager):
    """Changing only the age must not lose the index row"""
    old = make_person()
    await person_manager.save(old)
    updated = old.model_copy(update={"age": 99})

    await person_manager.update(old, updated)

    assert await person_manager.find_all_by_country("UK") == [updated]


@pytest.mark.asyncio
async def test_update_with_changed_name_replaces_index_row(person_manager):
    old = make_person()
    await person_manager.save(old)
    updated = old.model_copy(update={"first_name": "Jonathan"})

    await person_manager.update(old, updated)

    assert await person_manager.find_all_by_country("UK") == [updated]


@pytest.mark.asyncio
async def test_replace_missing_person_creates_nothing(person_manager):
    changes = PersonCreate(first_name="Laura", last_name="So", country="US", age=18)

    assert await person_manager.replace(uuid4(), changes) is None
    assert await person_manager.find_all() == []


@pytest.mark.asyncio
async def test_replace_keeps_id(person_manager):
    old = make_person()
    await person_manager.save(old)
    changes = PersonCreate(first_name="Laura", last_name="So", country="US", age=18)

    replaced = await person_manager.replace(old.id, changes)

    assert replaced == Person(id=old.id, first_name="Laura", last_name="So", country="US", age=18)
    assert await person_manager.find_all() == [replaced]


@pytest.mark.asyncio
async def test_delete_removes_both_rows(person_manager):
    person = make_person()
    await person_manager.save(person)

    await person_manager.delete(person)

    assert await person_manager.find_by_id(person.id) is None
    assert await person_manager.find_all_by_country("UK") == []


@pytest.mark.asyncio
async def test_failed_index_write_is_not_rolled_back(person_manager):
    """The primary write still lands when the index write fails"""
    await drop_country_index()
    person = make_person()

    with pytest.raises(StoreError) as exc_info:
        await person_manager.save(person)

    assert exc_info.value.operation == "save"
    assert len(exc_info.value.failures) == 1
    assert await person_manager.find_by_id(person.id) == person


@pytest.mark.asyncio
async def test_failed_update_reports_every_failed_write(person_manager):
    """Both index writes fail, the primary upsert still lands"""
    old = make_person()
    await person_manager.save(old)
    await drop_country_index()
    updated = old.model_copy(update={"country": "US", "age": 51})

    with pytest.raises(StoreError) as exc_info:
        await person_manager.update(old, updated)

    assert exc_info.value.operation == "update"
    assert len(exc_info.value.failures) == 2
    assert await person_manager.find_by_id(old.id) == updated


@pytest.mark.asyncio
async def test_failed_delete_is_not_rolled_back(person_manager):
    person = make_person()
    await person_manager.save(person)
    await drop_country_index()

    with pytest.raises(StoreError) as exc_info:
        await person_manager.delete(person)

    assert exc_info.value.operation == "delete"
    assert len(exc_info.value.failures) == 1
    assert await person_manager.find_by_id(person.id) is None


@pytest.mark.asyncio
async def test_cancelled_save_still_writes_both_rows(person_manager):
    """Cancelling the caller does not abandon writes already issued"""
    person = make_person()
    task = asyncio.create_task(person_manager.save(person))

    # Let the task reach the point where both writes are in flight
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    for _ in range(50):
        if await person_manager.find_by_id(person.id) and await person_manager.find_all_by_country("UK"):
            break
        await asyncio.sleep(0.1)
    # Let the orphaned write sessions close
    await asyncio.sleep(0.2)

    assert await person_manager.find_by_id(person.id) == person
    assert await person_manager.find_all_by_country("UK") == [person]


@pytest.mark.asyncio
async def test_upsert_rejects_unknown_dialect():
    session = SimpleNamespace(bind=SimpleNamespace(dialect=SimpleNamespace(name="mysql")))

    with pytest.raises(ValueError, match="mysql"):
        upsert(session, PersonRow, {"person_id": uuid4(), "age": 1})

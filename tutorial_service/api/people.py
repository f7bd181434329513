# /people endpoints

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from typing import List
from uuid import UUID, uuid4
from tutorial_service.core.database import get_session_factory
from tutorial_service.core.errors import StoreError
from tutorial_service.schemas.person import Person, PersonCreate
from tutorial_service.services.person_manager import PersonManager
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/people", tags=["people"])


def get_person_manager(
        session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)
) -> PersonManager:
    return PersonManager(session_factory)


def store_failure(operation: str, e: StoreError) -> HTTPException:
    logger.error("people_store_failed", operation=operation, error=str(e))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {operation} person"
    )


@router.get("", response_model=List[Person])
async def all_people(manager: PersonManager = Depends(get_person_manager)):
    """List every person, read from the country index"""
    try:
        return await manager.find_all()
    except StoreError as e:
        raise store_failure("list", e)


@router.get("/country/{country}", response_model=List[Person])
async def people_by_country(country: str, manager: PersonManager = Depends(get_person_manager)):
    """List the people living in a country"""
    try:
        return await manager.find_all_by_country(country)
    except StoreError as e:
        raise store_failure("list", e)


@router.get("/{person_id}", response_model=Person)
async def get_person(person_id: UUID, manager: PersonManager = Depends(get_person_manager)):
    try:
        person = await manager.find_by_id(person_id)
    except StoreError as e:
        raise store_failure("fetch", e)

    if person is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Person not found")
    return person


@router.post("", response_model=Person, status_code=status.HTTP_201_CREATED)
async def create_person(
        payload: PersonCreate,
        response: Response,
        manager: PersonManager = Depends(get_person_manager)
):
    """
    Create a person under a freshly generated id.

    - Writes both the people row and the people_by_country row
    - The Location header points at the new resource
    """
    try:
        person = await manager.save(payload.with_id(uuid4()))
    except StoreError as e:
        raise store_failure("save", e)

    response.headers["Location"] = f"/people/{person.id}"
    return person


@router.put("/{person_id}", response_model=Person)
async def update_person(
        person_id: UUID,
        payload: PersonCreate,
        manager: PersonManager = Depends(get_person_manager)
):
    """
    Replace an existing person. The id in the path wins over the body.

    A changed country or name moves the person's index row.
    """
    try:
        person = await manager.replace(person_id, payload)
    except StoreError as e:
        raise store_failure("update", e)

    if person is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Person not found")
    return person


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_person(person_id: UUID, manager: PersonManager = Depends(get_person_manager)):
    try:
        person = await manager.find_by_id(person_id)
        if person is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Person not found")
        await manager.delete(person)
    except StoreError as e:
        raise store_failure("delete", e)

    return Response(status_code=status.HTTP_204_NO_CONTENT)

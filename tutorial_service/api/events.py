# /events endpoints

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from datetime import datetime
from typing import List, Optional
from tutorial_service.core.database import get_session_factory
from tutorial_service.core.errors import StoreError
from tutorial_service.schemas.event import Event
from tutorial_service.services.event_manager import EventManager
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/events", tags=["events"])


def get_event_manager(
        session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)
) -> EventManager:
    return EventManager(session_factory)


@router.get("", response_model=List[Event])
async def all_events(manager: EventManager = Depends(get_event_manager)):
    """List every event. Ordering across types is not defined."""
    try:
        return await manager.find_all()
    except StoreError as e:
        logger.error("events_query_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch events"
        )


@router.get("/{event_type}", response_model=List[Event])
async def events_of_type(
        event_type: str,
        time: Optional[datetime] = Query(default=None, description="Only events starting after this ISO-8601 time; no offset means UTC"),
        manager: EventManager = Depends(get_event_manager)
):
    """
    List the events of a type, newest first.

    - **time**: exclusive lower bound on the start time
    """
    try:
        if time is None:
            return await manager.find_all_of_type(event_type)
        return await manager.find_all_of_type_after_start_time(event_type, time)
    except StoreError as e:
        logger.error("events_query_failed", type=event_type, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch events"
        )

from datetime import datetime, timezone
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tutorial_service.core.database import upsert
from tutorial_service.core.errors import StoreError
from tutorial_service.models.event import EventRow
from tutorial_service.schemas.event import Event
import structlog

logger = structlog.get_logger()


def to_utc_naive(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC"""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_event(row: EventRow) -> Event:
    return Event(id=row.event_id, type=row.type, start_time=row.start_time, value=row.value)


class EventManager:
    """Read queries over time-ordered events, partitioned by type"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_all(self) -> list[Event]:
        logger.info("events_find_all")
        return await self._query("find_all", select(EventRow))

    async def find_all_of_type(self, event_type: str) -> list[Event]:
        logger.info("events_find_all_of_type", type=event_type)
        stmt = (
            select(EventRow)
            .where(EventRow.type == event_type)
            .order_by(EventRow.start_time.desc(), EventRow.event_id)
        )
        return await self._query("find_all_of_type", stmt)

    async def find_all_of_type_after_start_time(
            self,
            event_type: str,
            time: datetime
    ) -> list[Event]:
        """Events of the given type that started strictly after ``time``"""
        logger.info("events_find_all_of_type_after_start_time", type=event_type, time=time.isoformat())
        stmt = (
            select(EventRow)
            .where(EventRow.type == event_type, EventRow.start_time > to_utc_naive(time))
            .order_by(EventRow.start_time.desc(), EventRow.event_id)
        )
        return await self._query("find_all_of_type_after_start_time", stmt)

    async def save(self, event: Event) -> Event:
        values = {
            "type": event.type,
            "start_time": to_utc_naive(event.start_time),
            "event_id": event.id,
            "value": event.value
        }
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await session.execute(upsert(session, EventRow, values))
        except SQLAlchemyError as e:
            logger.error("event_save_failed", event_id=str(event.id), error=str(e))
            raise StoreError("save", [e]) from e

        logger.info("event_saved", event_id=str(event.id), type=event.type)
        return event.model_copy(update={"start_time": values["start_time"]})

    async def _query(self, operation: str, stmt) -> list[Event]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return [to_event(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("store_read_failed", operation=operation, error=str(e))
            raise StoreError(operation, [e]) from e

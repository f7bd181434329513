"""
Manual event generator

Inserts "Transaction" events stamped with the current time, a random id
and a random value. Nothing schedules this; run it by hand.

Usage:
    python scripts/generate_events.py [count] [interval-seconds]
"""

import asyncio
import random
import sys
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from tutorial_service.core.config import settings
from tutorial_service.core.database import AsyncSessionLocal, async_engine, init_models
from tutorial_service.core.errors import StoreError
from tutorial_service.schemas.event import Event
from tutorial_service.services.event_manager import EventManager
import structlog

logger = structlog.get_logger()


def random_event(event_type: str = "Transaction") -> Event:
    return Event(
        id=uuid4(),
        type=event_type,
        start_time=datetime.now(timezone.utc),
        value=random.randint(-2**31, 2**31 - 1) * 100.0
    )


async def generate(count: int, interval: float) -> int:
    """Insert ``count`` events, pausing ``interval`` seconds between them"""
    if settings.create_schema:
        await init_models()

    manager = EventManager(AsyncSessionLocal)
    inserted = 0

    try:
        for i in range(count):
            try:
                await manager.save(random_event())
                inserted += 1
            except StoreError as e:
                logger.error("event_generation_failed", index=i, error=str(e))

            if interval and i < count - 1:
                await asyncio.sleep(interval)
    finally:
        await async_engine.dispose()

    logger.info("events_generated", requested=count, inserted=inserted)
    return inserted


def main():
    count = int(sys.argv[1]) if len(sys.argv) > 1 else 10
    interval = float(sys.argv[2]) if len(sys.argv) > 2 else 1.0

    print(f"Generating {count} events every {interval}s. Press Ctrl+C to stop.")

    try:
        inserted = asyncio.run(generate(count, interval))
    except KeyboardInterrupt:
        print("\nGenerator stopped.")
        return

    print(f"Inserted {inserted} of {count} events")


if __name__ == "__main__":
    main()

"""
Async HTTP client for the People & Events API.

``PeopleClient`` maps one coroutine to each REST operation and hands back
the raw ``httpx.Response`` so callers can inspect status codes and headers.
``run_demo`` walks a person through create, read, update and delete.
"""

import asyncio
from datetime import datetime
from typing import Optional
from uuid import UUID

import httpx
import structlog

from tutorial_service.core.config import settings
from tutorial_service.schemas.person import PersonCreate

logger = structlog.get_logger()


class PeopleClient:
    """Thin async wrapper around the REST surface"""

    def __init__(self, base_url: Optional[str] = None, **client_options):
        self.client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            headers={"Accept": "application/json"},
            **client_options
        )

    async def __aenter__(self) -> "PeopleClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self.client.aclose()

    async def create(self, person: PersonCreate) -> httpx.Response:
        return await self.client.post("/people", json=_payload(person))

    async def get(self, person_id: UUID | str) -> httpx.Response:
        return await self.client.get(f"/people/{person_id}")

    async def all(self) -> httpx.Response:
        return await self.client.get("/people")

    async def by_country(self, country: str) -> httpx.Response:
        return await self.client.get(f"/people/country/{country}")

    async def update(self, person_id: UUID | str, person: PersonCreate) -> httpx.Response:
        return await self.client.put(f"/people/{person_id}", json=_payload(person))

    async def delete(self, person_id: UUID | str) -> httpx.Response:
        return await self.client.delete(f"/people/{person_id}")

    async def events(
            self,
            event_type: Optional[str] = None,
            after: Optional[datetime] = None
    ) -> httpx.Response:
        if event_type is None:
            return await self.client.get("/events")
        params = {"time": after.isoformat()} if after is not None else None
        return await self.client.get(f"/events/{event_type}", params=params)

    async def location(self, location_id: UUID | str) -> httpx.Response:
        return await self.client.get(f"/locations/{location_id}")


def _payload(person: PersonCreate) -> dict:
    return person.model_dump(mode="json", by_alias=True)


async def run_demo(client: PeopleClient) -> dict[str, int]:
    """
    Create, read, list, update and delete one person.

    Returns the status code observed for each step.
    """
    statuses = {}

    record = PersonCreate(first_name="John", last_name="Doe", country="UK", age=50)
    response = await client.create(record)
    statuses["post"] = response.status_code
    logger.info("demo_post", status_code=response.status_code, location=response.headers.get("location"))
    response.raise_for_status()
    person_id = response.json()["id"]

    get_response, all_response = await asyncio.gather(client.get(person_id), client.all())
    statuses["get"] = get_response.status_code
    statuses["all"] = all_response.status_code
    logger.info("demo_get", status_code=get_response.status_code, person=get_response.json())
    logger.info("demo_all", status_code=all_response.status_code, count=len(all_response.json()))

    updated = PersonCreate(first_name="Laura", last_name="So", country="US", age=18)
    response = await client.update(person_id, updated)
    statuses["put"] = response.status_code
    logger.info("demo_put", status_code=response.status_code, person=response.json())

    response = await client.delete(person_id)
    statuses["delete"] = response.status_code
    logger.info("demo_delete", status_code=response.status_code)

    return statuses

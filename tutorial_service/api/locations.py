from fastapi import APIRouter
from uuid import UUID
from tutorial_service.schemas.location import Location

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get("/{location_id}", response_model=Location)
async def get_location(location_id: UUID):
    """Static demo location; the id is echoed, nothing is looked up"""
    return Location(id=location_id, street="Westminster", country="UK")

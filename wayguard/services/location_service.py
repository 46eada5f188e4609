import uuid
from typing import List, Optional

import structlog
from pydantic import BaseModel

from wayguard.core.config import settings
from wayguard.core.errors import Unauthenticated, ValidationError
from wayguard.models.domain import Coordinate, PlaceType, SafetyAssessment, UserLocation
from wayguard.services.place_index import PlaceHit, PlaceIndex
from wayguard.services.record_store import USER_LOCATIONS, RecordStore
from wayguard.services.safety_aggregator import SafetyAggregator
from wayguard.utils.geo import format_address_stub

logger = structlog.get_logger(__name__)


class LocationResult(BaseModel):
    location: UserLocation
    safety: Optional[SafetyAssessment] = None
    address: str


class NearbyResult(BaseModel):
    places: List[PlaceHit]
    safety: SafetyAssessment


class LocationService:
    """Append-only location log plus the nearby-places view."""

    def __init__(self, store: RecordStore, place_index: PlaceIndex, aggregator: SafetyAggregator):
        self.store = store
        self.place_index = place_index
        self.aggregator = aggregator

    async def save_location(
        self,
        user_id: str,
        coordinate: Coordinate,
        accuracy_meters: Optional[float] = None,
        is_emergency: bool = False,
    ) -> UserLocation:
        if accuracy_meters is not None and accuracy_meters < 0:
            raise ValidationError("Accuracy must not be negative.", field="accuracy")
        location = UserLocation(
            id=str(uuid.uuid4()),
            user_id=user_id,
            coordinate=coordinate,
            accuracy_meters=accuracy_meters,
            is_emergency=is_emergency,
            address=format_address_stub(coordinate),
        )
        await self.store.insert(USER_LOCATIONS, location.id, location.model_dump(mode="json"))
        return location

    async def record_location(
        self,
        user_id: Optional[str],
        coordinate: Coordinate,
        accuracy_meters: Optional[float] = None,
        is_emergency: bool = False,
    ) -> LocationResult:
        """Log a location ping; emergency pings also get an area assessment."""
        if not user_id:
            raise Unauthenticated("A valid identity token is required to record locations.")

        location = await self.save_location(user_id, coordinate, accuracy_meters, is_emergency)

        safety = None
        if is_emergency:
            safety = await self.aggregator.assess(coordinate, settings.AREA_SAFETY_RADIUS_M)
            logger.warning(
                "emergency_location_recorded",
                user_id=user_id,
                location_id=location.id,
                overall_score=safety.overall_score,
            )
        else:
            logger.info("location_recorded", user_id=user_id, location_id=location.id)

        return LocationResult(location=location, safety=safety, address=location.address)

    async def nearby(
        self,
        center: Coordinate,
        radius_meters: float = settings.DEFAULT_PLACE_RADIUS_M,
        type_filter: Optional[PlaceType] = None,
    ) -> NearbyResult:
        places = await self.place_index.query(center, radius_meters, type_filter)
        safety = await self.aggregator.assess(center, settings.AREA_SAFETY_RADIUS_M)
        return NearbyResult(places=places, safety=safety)

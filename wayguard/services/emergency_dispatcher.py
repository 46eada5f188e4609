"""Simulated emergency dispatch.

No paging, SMS or telephony happens here: the response tells the caller which
number to dial and which responders are closest.
"""
import time
import uuid
from typing import Dict, List, Optional, Union

import structlog
from pydantic import BaseModel

from wayguard.core.config import settings
from wayguard.core.errors import ValidationError
from wayguard.models.domain import Coordinate, EmergencyType, PlaceType
from wayguard.services.contacts import ContactDirectory
from wayguard.services.location_service import LocationService
from wayguard.services.place_index import PlaceHit, PlaceIndex

logger = structlog.get_logger(__name__)

EMERGENCY_NUMBERS: Dict[EmergencyType, str] = {
    EmergencyType.MEDICAL: "108",
    EmergencyType.POLICE: "100",
    EmergencyType.FIRE: "101",
    EmergencyType.GENERAL: "112",
}

SERVICE_PLACE_TYPES: Dict[EmergencyType, Optional[PlaceType]] = {
    EmergencyType.MEDICAL: PlaceType.HOSPITAL,
    EmergencyType.POLICE: PlaceType.POLICE,
    EmergencyType.FIRE: PlaceType.SAFETY,
    EmergencyType.GENERAL: None,
}

DISPATCH_STATUS = "dispatched"
ESTIMATED_ARRIVAL = "8-12 minutes"


class EmergencyResponse(BaseModel):
    request_id: str
    status: str
    estimated_arrival: str
    nearest_services: List[PlaceHit]
    emergency_number: str
    user_id: Optional[str] = None


def parse_emergency_type(value: Union[EmergencyType, str, None]) -> EmergencyType:
    if value is None or value == "":
        raise ValidationError("Emergency type is required.", field="emergency_type")
    try:
        return EmergencyType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in EmergencyType)
        raise ValidationError(f"Emergency type must be one of: {allowed}.", field="emergency_type")


class EmergencyDispatcher:

    def __init__(
        self,
        place_index: PlaceIndex,
        location_service: Optional[LocationService] = None,
        contacts: Optional[ContactDirectory] = None,
    ):
        self.place_index = place_index
        self.location_service = location_service
        self.contacts = contacts

    async def dispatch(
        self,
        coordinate: Optional[Coordinate],
        emergency_type: Union[EmergencyType, str, None],
        description: Optional[str] = None,
        severity: Optional[int] = None,
        user_id: Optional[str] = None,
    ) -> EmergencyResponse:
        """Route an emergency to a service number and the nearest responders.

        Callers without an identity are served the same way; a known user_id
        only adds the best-effort location log and contact lookup.
        """
        if coordinate is None:
            raise ValidationError("Location is required.", field="coordinate")
        etype = parse_emergency_type(emergency_type)
        if severity is not None and not 1 <= severity <= 5:
            raise ValidationError("Severity must be between 1 and 5.", field="severity")

        if user_id:
            await self._note_identified_caller(user_id, coordinate)
        else:
            logger.info("emergency_unauthenticated_caller")

        nearest = await self.place_index.query(
            coordinate,
            settings.EMERGENCY_SEARCH_RADIUS_M,
            SERVICE_PLACE_TYPES[etype],
            limit=settings.EMERGENCY_NEAREST_LIMIT,
        )

        response = EmergencyResponse(
            request_id=f"EMR-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}",
            status=DISPATCH_STATUS,
            estimated_arrival=ESTIMATED_ARRIVAL,
            nearest_services=nearest,
            emergency_number=EMERGENCY_NUMBERS[etype],
            user_id=user_id,
        )
        logger.warning(
            "emergency_dispatched",
            request_id=response.request_id,
            emergency_type=etype.value,
            severity=severity,
            description=description,
            latitude=coordinate.latitude,
            longitude=coordinate.longitude,
            services_found=len(nearest),
        )
        return response

    async def _note_identified_caller(self, user_id: str, coordinate: Coordinate) -> None:
        # Neither step may block the dispatch itself
        if self.location_service is not None:
            try:
                await self.location_service.save_location(user_id, coordinate, is_emergency=True)
            except Exception as e:
                logger.error("emergency_location_log_failed", user_id=user_id, error=str(e))
        if self.contacts is not None:
            try:
                count = await self.contacts.count_for_user(user_id)
                logger.info("emergency_contacts_to_notify", user_id=user_id, count=count)
            except Exception as e:
                logger.error("emergency_contact_lookup_failed", user_id=user_id, error=str(e))

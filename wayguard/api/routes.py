from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from wayguard.core.config import settings
from wayguard.models.domain import EmergencyContact, PlaceDraft, PlaceType
from wayguard.models.dto import (
    ContactCreateRequest,
    ContactsResponse,
    EmergencyRequest,
    EmergencyResponseDTO,
    ErrorResponse,
    IncidentRequest,
    LocationRequest,
    LocationResponse,
    PlaceCreateRequest,
    PlacesResponse,
    PublicIncident,
    PublicLocation,
    PublicPlace,
)
from wayguard.services.contacts import ContactDirectory
from wayguard.services.emergency_dispatcher import EmergencyDispatcher
from wayguard.services.incident_reporter import IncidentReporter
from wayguard.services.location_service import LocationService
from wayguard.services.place_index import PlaceIndex
from wayguard.utils.geo import make_coordinate
from wayguard.utils.security import Identity, get_optional_identity, require_identity

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}

# ----------------------------------------------------------------------
# Service dependencies (built in main.init_services)
# ----------------------------------------------------------------------
def get_place_index(request: Request) -> PlaceIndex:
    return request.app.state.place_index


def get_location_service(request: Request) -> LocationService:
    return request.app.state.location_service


def get_dispatcher(request: Request) -> EmergencyDispatcher:
    return request.app.state.dispatcher


def get_incident_reporter(request: Request) -> IncidentReporter:
    return request.app.state.incident_reporter


def get_contacts(request: Request) -> ContactDirectory:
    return request.app.state.contacts


# ----------------------------------------------------------------------
# Locations
# ----------------------------------------------------------------------
@router.post("/locations", response_model=LocationResponse, responses=ERROR_RESPONSES)
async def record_location(
    data: LocationRequest,
    identity: Identity = Depends(require_identity),
    location_service: LocationService = Depends(get_location_service),
):
    """Log the caller's location; emergency pings include an area safety assessment."""
    result = await location_service.record_location(
        identity.user_id,
        make_coordinate(data.latitude, data.longitude),
        accuracy_meters=data.accuracy,
        is_emergency=data.is_emergency,
    )
    return LocationResponse(
        location=PublicLocation.from_location(result.location),
        safety=result.safety,
        address=result.address,
    )


# ----------------------------------------------------------------------
# Places
# ----------------------------------------------------------------------
@router.get("/places", response_model=PlacesResponse, responses=ERROR_RESPONSES)
async def nearby_places(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius: float = Query(settings.DEFAULT_PLACE_RADIUS_M, gt=0),
    type: Optional[PlaceType] = Query(None),
    location_service: LocationService = Depends(get_location_service),
):
    """Places within the radius, nearest first, plus the area safety score."""
    result = await location_service.nearby(make_coordinate(latitude, longitude), radius, type)
    return PlacesResponse(
        places=[PublicPlace.from_place(place, dist) for place, dist in result.places],
        safety=result.safety,
    )


@router.post(
    "/places",
    response_model=PublicPlace,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def add_place(data: PlaceCreateRequest, place_index: PlaceIndex = Depends(get_place_index)):
    """Submit a new place. Open to anonymous callers; new places start unverified."""
    place = await place_index.add(
        PlaceDraft(
            name=data.name,
            type=data.type,
            coordinate=make_coordinate(data.latitude, data.longitude),
            address=data.address,
            phone=data.phone,
            is_open=data.is_open,
        )
    )
    return PublicPlace.from_place(place)


# ----------------------------------------------------------------------
# Emergency
# ----------------------------------------------------------------------
@router.post("/emergency", response_model=EmergencyResponseDTO, responses={400: {"model": ErrorResponse}})
async def emergency(
    data: EmergencyRequest,
    identity: Optional[Identity] = Depends(get_optional_identity),
    dispatcher: EmergencyDispatcher = Depends(get_dispatcher),
):
    """Simulated dispatch. Never rejected for missing or invalid credentials."""
    result = await dispatcher.dispatch(
        make_coordinate(data.latitude, data.longitude),
        data.emergency_type,
        description=data.description,
        severity=data.severity,
        user_id=identity.user_id if identity else None,
    )
    return EmergencyResponseDTO(
        request_id=result.request_id,
        status=result.status,
        estimated_arrival=result.estimated_arrival,
        nearest_services=[PublicPlace.from_place(place, dist) for place, dist in result.nearest_services],
        emergency_number=result.emergency_number,
    )


@router.get("/emergency-contacts", response_model=ContactsResponse, responses=ERROR_RESPONSES)
async def list_emergency_contacts(
    identity: Identity = Depends(require_identity),
    contacts: ContactDirectory = Depends(get_contacts),
):
    return ContactsResponse(contacts=await contacts.list_for_user(identity.user_id))


@router.post(
    "/emergency-contacts",
    response_model=EmergencyContact,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def add_emergency_contact(
    data: ContactCreateRequest,
    identity: Identity = Depends(require_identity),
    contacts: ContactDirectory = Depends(get_contacts),
):
    return await contacts.add(
        identity.user_id,
        data.name,
        data.phone,
        relationship=data.relationship,
        is_primary=data.is_primary,
    )


# ----------------------------------------------------------------------
# Incidents
# ----------------------------------------------------------------------
@router.post(
    "/incidents",
    response_model=PublicIncident,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def report_incident(
    data: IncidentRequest,
    identity: Identity = Depends(require_identity),
    reporter: IncidentReporter = Depends(get_incident_reporter),
):
    """Record an incident. Severity 4 or 5 also opens a caution zone around it."""
    incident = await reporter.report(
        identity.user_id,
        make_coordinate(data.latitude, data.longitude),
        data.incident_type,
        data.description,
        data.severity,
    )
    return PublicIncident.from_incident(incident)

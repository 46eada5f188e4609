from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from wayguard.models.domain import (
    EmergencyContact,
    EmergencyType,
    IncidentReport,
    IncidentStatus,
    IncidentType,
    Place,
    PlaceType,
    SafetyAssessment,
    UserLocation,
)

# --- API Request Models ---

class LocationRequest(BaseModel):
    """Request body for POST /api/locations."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy: Optional[float] = Field(None, ge=0, description="Reported GPS accuracy in meters.")
    is_emergency: bool = False


class PlaceCreateRequest(BaseModel):
    """Request body for POST /api/places."""
    name: str = Field(..., min_length=1)
    type: PlaceType
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: Optional[str] = None
    phone: Optional[str] = None
    is_open: Optional[bool] = None


class EmergencyRequest(BaseModel):
    """Request body for POST /api/emergency."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    emergency_type: EmergencyType
    description: Optional[str] = None
    severity: Optional[int] = Field(None, ge=1, le=5, description="1 = low, 5 = critical.")


class IncidentRequest(BaseModel):
    """Request body for POST /api/incidents."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    incident_type: IncidentType
    description: Optional[str] = None
    severity: int = Field(..., ge=1, le=5)


class ContactCreateRequest(BaseModel):
    """Request body for POST /api/emergency-contacts."""
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    relationship: Optional[str] = None
    is_primary: bool = False


# --- Public Data Transfer Objects (DTOs) ---

class PublicPlace(BaseModel):
    """A place as returned by nearby queries."""
    id: str
    name: str
    type: PlaceType
    latitude: float
    longitude: float
    address: str
    phone: Optional[str] = None
    rating: float
    is_open: bool
    distance_meters: Optional[float] = Field(None, description="Distance from the query point in meters.")

    @classmethod
    def from_place(cls, place: Place, distance: Optional[float] = None) -> "PublicPlace":
        return cls(
            id=place.id,
            name=place.name,
            type=place.type,
            latitude=place.coordinate.latitude,
            longitude=place.coordinate.longitude,
            address=place.address,
            phone=place.phone,
            rating=place.rating,
            is_open=place.is_open,
            distance_meters=round(distance, 2) if distance is not None else None,
        )


class PlacesResponse(BaseModel):
    places: List[PublicPlace]
    safety: SafetyAssessment


class PublicLocation(BaseModel):
    id: str
    user_id: str
    latitude: float
    longitude: float
    accuracy_meters: Optional[float] = None
    is_emergency: bool
    address: str
    timestamp: datetime

    @classmethod
    def from_location(cls, location: UserLocation) -> "PublicLocation":
        return cls(
            id=location.id,
            user_id=location.user_id,
            latitude=location.coordinate.latitude,
            longitude=location.coordinate.longitude,
            accuracy_meters=location.accuracy_meters,
            is_emergency=location.is_emergency,
            address=location.address,
            timestamp=location.timestamp,
        )


class LocationResponse(BaseModel):
    location: PublicLocation
    safety: Optional[SafetyAssessment] = None
    address: str


class EmergencyResponseDTO(BaseModel):
    request_id: str
    status: str
    estimated_arrival: str
    nearest_services: List[PublicPlace]
    emergency_number: str


class PublicIncident(BaseModel):
    id: str
    reporter_id: Optional[str] = None
    latitude: float
    longitude: float
    incident_type: IncidentType
    description: Optional[str] = None
    severity: int
    reported_at: datetime
    status: IncidentStatus
    resolved_at: Optional[datetime] = None

    @classmethod
    def from_incident(cls, incident: IncidentReport) -> "PublicIncident":
        return cls(
            id=incident.id,
            reporter_id=incident.reporter_id,
            latitude=incident.coordinate.latitude,
            longitude=incident.coordinate.longitude,
            incident_type=incident.incident_type,
            description=incident.description,
            severity=incident.severity,
            reported_at=incident.reported_at,
            status=incident.status,
            resolved_at=incident.resolved_at,
        )


class ContactsResponse(BaseModel):
    contacts: List[EmergencyContact]


# --- Error Response Model ---

class ErrorResponse(BaseModel):
    """Standardized error response model."""
    error: str = Field(..., description="A machine-readable error code.")
    detail: str = Field(..., description="A human-readable explanation.")
    field: Optional[str] = Field(None, description="The request field that failed validation.")
    error_id: Optional[str] = Field(None, description="Reference for server-side logs.")

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Enumerations ---

class PlaceType(str, Enum):
    HOSPITAL = "hospital"
    POLICE = "police"
    HOTEL = "hotel"
    RESTAURANT = "restaurant"
    TRAVEL = "travel"
    GUIDE = "guide"
    VEHICLE = "vehicle"
    HOME = "home"
    SAFETY = "safety"
    OTHER = "other"


class IncidentType(str, Enum):
    THEFT = "theft"
    ASSAULT = "assault"
    FRAUD = "fraud"
    HARASSMENT = "harassment"
    ACCIDENT = "accident"
    MEDICAL = "medical"
    OTHER = "other"


class IncidentStatus(str, Enum):
    REPORTED = "reported"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"


class ZoneType(str, Enum):
    CAUTION = "caution"
    DANGER = "danger"
    SAFE = "safe"
    VERIFIED_SAFE = "verified-safe"


class EmergencyType(str, Enum):
    MEDICAL = "medical"
    POLICE = "police"
    FIRE = "fire"
    GENERAL = "general"


# --- Records ---

class Coordinate(BaseModel):
    """A WGS84 point. Immutable."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class Place(BaseModel):
    id: str
    name: str
    type: PlaceType
    coordinate: Coordinate
    address: str = ""
    phone: Optional[str] = None
    rating: float = Field(0.0, ge=0.0, le=5.0)
    is_open: bool = True
    verified: bool = False
    created_at: datetime = Field(default_factory=utcnow)


class PlaceDraft(BaseModel):
    """User-submitted place before an id is assigned.

    Fields are optional here so that the place index can report exactly which
    required field is missing.
    """
    name: Optional[str] = None
    type: Optional[PlaceType] = None
    coordinate: Optional[Coordinate] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    is_open: Optional[bool] = None


class IncidentReport(BaseModel):
    id: str
    reporter_id: Optional[str] = None
    coordinate: Coordinate
    incident_type: IncidentType
    description: Optional[str] = None
    severity: int = Field(..., ge=1, le=5)
    reported_at: datetime = Field(default_factory=utcnow)
    status: IncidentStatus = IncidentStatus.REPORTED
    resolved_at: Optional[datetime] = None


class SafetyZone(BaseModel):
    id: str
    name: str
    zone_type: ZoneType
    coordinate: Coordinate
    radius_meters: float = Field(..., gt=0)
    risk_level: int = Field(..., ge=1, le=5)
    verified: bool = False
    active: bool = True
    created_by: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class UserLocation(BaseModel):
    """One entry of the append-only location log."""
    id: str
    user_id: str
    coordinate: Coordinate
    accuracy_meters: Optional[float] = None
    is_emergency: bool = False
    address: str
    timestamp: datetime = Field(default_factory=utcnow)


class EmergencyContact(BaseModel):
    id: str
    user_id: str
    name: str
    phone: str
    relationship: Optional[str] = None
    is_primary: bool = False
    created_at: datetime = Field(default_factory=utcnow)


# --- Derived (never persisted) ---

class RiskZoneSummary(BaseModel):
    name: str
    type: ZoneType
    risk_level: int
    distance_meters: float


class IncidentSummary(BaseModel):
    type: IncidentType
    severity: int
    distance_meters: float
    reported_at: datetime


class SafetyAssessment(BaseModel):
    overall_score: float = Field(..., ge=1.0, le=5.0)
    risk_zones: List[RiskZoneSummary] = Field(default_factory=list)
    recent_incidents: List[IncidentSummary] = Field(default_factory=list)
    zone_count: int = 0
    incident_count: int = 0

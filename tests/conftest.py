import uuid

import httpx
import pytest
from fastapi.testclient import TestClient

from wayguard.core.config import settings
from wayguard.main import app, init_services
from wayguard.models.domain import (
    Coordinate,
    IncidentReport,
    IncidentType,
    SafetyZone,
    ZoneType,
)
from wayguard.services.contacts import ContactDirectory
from wayguard.services.emergency_dispatcher import EmergencyDispatcher
from wayguard.services.incident_reporter import IncidentReporter
from wayguard.services.location_service import LocationService
from wayguard.services.place_index import PlaceIndex
from wayguard.services.record_store import INCIDENT_REPORTS, SAFETY_ZONES, InMemoryRecordStore
from wayguard.services.safety_aggregator import SafetyAggregator
from wayguard.utils import security
from wayguard.utils.geo import EARTH_RADIUS_M

METERS_PER_DEGREE_LAT = EARTH_RADIUS_M * 3.141592653589793 / 180

CENTER = Coordinate(latitude=28.6140, longitude=77.2095)


def north_of(origin: Coordinate, meters: float) -> Coordinate:
    """A point `meters` due north of origin (exact along a meridian)."""
    return Coordinate(latitude=origin.latitude + meters / METERS_PER_DEGREE_LAT, longitude=origin.longitude)


async def add_zone(store, coordinate, risk_level=3, radius_meters=200, active=True, zone_type=ZoneType.DANGER):
    zone = SafetyZone(
        id=str(uuid.uuid4()),
        name=f"zone-{risk_level}",
        zone_type=zone_type,
        coordinate=coordinate,
        radius_meters=radius_meters,
        risk_level=risk_level,
        active=active,
    )
    await store.insert(SAFETY_ZONES, zone.id, zone.model_dump(mode="json"))
    return zone


async def add_incident(store, coordinate, severity=3, incident_type=IncidentType.THEFT, **extra):
    incident = IncidentReport(
        id=str(uuid.uuid4()),
        coordinate=coordinate,
        incident_type=incident_type,
        severity=severity,
        **extra,
    )
    await store.insert(INCIDENT_REPORTS, incident.id, incident.model_dump(mode="json"))
    return incident


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def place_index(store):
    return PlaceIndex(store)


@pytest.fixture
def aggregator(store):
    return SafetyAggregator(store)


@pytest.fixture
def location_service(store, place_index, aggregator):
    return LocationService(store, place_index, aggregator)


@pytest.fixture
def contacts(store):
    return ContactDirectory(store)


@pytest.fixture
def dispatcher(place_index, location_service, contacts):
    return EmergencyDispatcher(place_index, location_service, contacts)


@pytest.fixture
def reporter(store):
    return IncidentReporter(store)


@pytest.fixture
def client(store):
    with TestClient(app) as test_client:
        # Replace the seeded startup services with ones backed by a fresh store
        init_services(app, store)
        yield test_client


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {settings.DEV_IDENTITY_TOKEN}"}


@pytest.fixture
def identity_provider(monkeypatch):
    """Point identity lookups at an httpx.MockTransport driven by `handler`."""
    real_client = httpx.AsyncClient

    def install(handler):
        transport = httpx.MockTransport(handler)
        monkeypatch.setattr(settings, "AUTH_USER_URL", "https://auth.example.test/auth/v1/user")
        monkeypatch.setattr(
            security.httpx,
            "AsyncClient",
            lambda **kwargs: real_client(transport=transport, **kwargs),
        )

    return install

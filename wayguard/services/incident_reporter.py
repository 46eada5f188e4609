import uuid
from typing import Optional, Union

import structlog

from wayguard.core.config import settings
from wayguard.core.errors import Unauthenticated, ValidationError
from wayguard.models.domain import Coordinate, IncidentReport, IncidentType, SafetyZone, ZoneType
from wayguard.services.record_store import INCIDENT_REPORTS, SAFETY_ZONES, RecordStore

logger = structlog.get_logger(__name__)


class IncidentReporter:
    """Stores incident reports and turns severe ones into caution zones."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def report(
        self,
        reporter_id: Optional[str],
        coordinate: Optional[Coordinate],
        incident_type: Union[IncidentType, str, None],
        description: Optional[str],
        severity: Optional[int],
    ) -> IncidentReport:
        if not reporter_id:
            raise Unauthenticated("Authentication required for incident reporting")
        if coordinate is None:
            raise ValidationError("Location is required.", field="coordinate")
        if incident_type is None or incident_type == "":
            raise ValidationError("Incident type is required.", field="incident_type")
        try:
            itype = IncidentType(incident_type)
        except ValueError:
            raise ValidationError(f"Unknown incident type: {incident_type}.", field="incident_type")
        if severity is None or not 1 <= severity <= 5:
            raise ValidationError("Severity must be between 1 and 5.", field="severity")

        incident = IncidentReport(
            id=str(uuid.uuid4()),
            reporter_id=reporter_id,
            coordinate=coordinate,
            incident_type=itype,
            description=description,
            severity=severity,
        )
        await self.store.insert(INCIDENT_REPORTS, incident.id, incident.model_dump(mode="json"))
        logger.info(
            "incident_reported",
            incident_id=incident.id,
            incident_type=itype.value,
            severity=severity,
            reporter_id=reporter_id,
        )

        if severity >= settings.AUTO_ZONE_MIN_SEVERITY:
            await self._create_caution_zone(incident)

        return incident

    async def _create_caution_zone(self, incident: IncidentReport) -> Optional[SafetyZone]:
        """Best-effort follow-up write; a failure never undoes the report."""
        itype = incident.incident_type.value
        zone = SafetyZone(
            id=str(uuid.uuid4()),
            name=f"{itype} incident area",
            zone_type=ZoneType.CAUTION,
            coordinate=incident.coordinate,
            radius_meters=settings.AUTO_ZONE_RADIUS_M,
            risk_level=incident.severity,
            verified=False,
            active=True,
            created_by=incident.reporter_id,
            description=f"Recent {itype} incident reported. Exercise caution.",
        )
        try:
            await self.store.insert(SAFETY_ZONES, zone.id, zone.model_dump(mode="json"))
        except Exception as e:
            logger.error("caution_zone_create_failed", incident_id=incident.id, error=str(e))
            return None
        logger.info("caution_zone_created", zone_id=zone.id, incident_id=incident.id, risk_level=zone.risk_level)
        return zone

"""Area safety scoring.

Active risk zones and unresolved incident reports around a point are pooled
into one weighted average of their risk levels / severities (1-5). Each
contribution is weighted by how far it sits from the query point relative to
the query radius:

    distance <= radius / 3       -> 1.0
    distance <= 2 * radius / 3   -> 0.6
    otherwise                    -> 0.3

The score is ``clamp(5 - weighted_average, 1, 5)``; with nothing nearby it is 5.
Nothing is cached: each call reads the current zones and incidents.
"""
from typing import List, Optional, Tuple

import structlog
from pydantic import ValidationError as PydanticValidationError

from wayguard.core.config import settings
from wayguard.models.domain import (
    Coordinate,
    IncidentReport,
    IncidentStatus,
    IncidentSummary,
    RiskZoneSummary,
    SafetyAssessment,
    SafetyZone,
)
from wayguard.services.record_store import INCIDENT_REPORTS, SAFETY_ZONES, RecordStore
from wayguard.utils.geo import distance_meters, require_positive_radius

logger = structlog.get_logger(__name__)

MAX_SCORE = 5.0
MIN_SCORE = 1.0


def distance_weight(distance: float, radius_meters: float) -> float:
    if distance <= radius_meters / 3:
        return 1.0
    if distance <= 2 * radius_meters / 3:
        return 0.6
    return 0.3


def score_from_signals(signals: List[Tuple[int, float]], radius_meters: float) -> float:
    """Turn (risk, distance) pairs into a 1-5 score, 5 being safest."""
    total_weight = 0.0
    weighted_risk = 0.0
    for risk, distance in signals:
        weight = distance_weight(distance, radius_meters)
        total_weight += weight
        weighted_risk += weight * risk

    if total_weight == 0:
        return MAX_SCORE

    risk_raw = weighted_risk / total_weight
    return max(MIN_SCORE, min(MAX_SCORE, MAX_SCORE - risk_raw))


class SafetyAggregator:

    def __init__(self, store: RecordStore, display_limit: int = settings.SAFETY_DISPLAY_LIMIT):
        self.store = store
        self.display_limit = display_limit

    async def _load(self, table: str, model):
        items = []
        for record in await self.store.all(table):
            try:
                items.append(model.model_validate(record))
            except PydanticValidationError as e:
                logger.warning("safety_record_invalid", table=table, record_id=record.get("id"), error=str(e))
        return items

    async def nearby_zones(self, center: Coordinate, radius_meters: float) -> List[Tuple[SafetyZone, float]]:
        """Active zones the point is inside of, or whose center lies within the radius."""
        hits = []
        for zone in await self._load(SAFETY_ZONES, SafetyZone):
            if not zone.active:
                continue
            dist = distance_meters(center, zone.coordinate)
            if dist <= max(radius_meters, zone.radius_meters):
                hits.append((zone, dist))
        hits.sort(key=lambda hit: (hit[1], hit[0].id))
        return hits

    async def nearby_incidents(self, center: Coordinate, radius_meters: float) -> List[Tuple[IncidentReport, float]]:
        hits = []
        for incident in await self._load(INCIDENT_REPORTS, IncidentReport):
            if incident.status == IncidentStatus.RESOLVED:
                continue
            dist = distance_meters(center, incident.coordinate)
            if dist <= radius_meters:
                hits.append((incident, dist))
        hits.sort(key=lambda hit: (hit[1], hit[0].id))
        return hits

    async def assess(self, center: Coordinate, radius_meters: Optional[float]) -> SafetyAssessment:
        radius_meters = require_positive_radius(radius_meters)

        zones = await self.nearby_zones(center, radius_meters)
        incidents = await self.nearby_incidents(center, radius_meters)

        signals = [(zone.risk_level, dist) for zone, dist in zones]
        signals += [(incident.severity, dist) for incident, dist in incidents]
        score = score_from_signals(signals, radius_meters)

        logger.debug(
            "area_assessed",
            latitude=center.latitude,
            longitude=center.longitude,
            radius_meters=radius_meters,
            zones=len(zones),
            incidents=len(incidents),
            score=score,
        )

        return SafetyAssessment(
            overall_score=score,
            risk_zones=[
                RiskZoneSummary(
                    name=zone.name,
                    type=zone.zone_type,
                    risk_level=zone.risk_level,
                    distance_meters=round(dist, 2),
                )
                for zone, dist in zones[:self.display_limit]
            ],
            recent_incidents=[
                IncidentSummary(
                    type=incident.incident_type,
                    severity=incident.severity,
                    distance_meters=round(dist, 2),
                    reported_at=incident.reported_at,
                )
                for incident, dist in incidents[:self.display_limit]
            ],
            zone_count=len(zones),
            incident_count=len(incidents),
        )

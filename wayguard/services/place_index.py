import json
import uuid
from typing import AsyncIterator, List, Optional, Tuple

import structlog
from pydantic import ValidationError as PydanticValidationError

from wayguard.core.errors import ValidationError
from wayguard.models.domain import Coordinate, Place, PlaceDraft, PlaceType
from wayguard.services.record_store import PLACES, RecordStore
from wayguard.utils.geo import distance_meters, require_positive_radius

logger = structlog.get_logger(__name__)

PlaceHit = Tuple[Place, float]


class PlaceIndex:
    """Points of interest with radius/type queries.

    Every query re-reads the place set from the store, so there is no cache
    to invalidate when places are added.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    async def _places(self) -> List[Place]:
        places = []
        for record in await self.store.all(PLACES):
            try:
                places.append(Place.model_validate(record))
            except PydanticValidationError as e:
                logger.warning("place_record_invalid", record_id=record.get("id"), error=str(e))
        return places

    async def iter_nearby(
        self,
        center: Coordinate,
        radius_meters: float,
        type_filter: Optional[PlaceType] = None,
    ) -> AsyncIterator[PlaceHit]:
        """Yield (place, distance) within the radius, nearest first, ties by id."""
        require_positive_radius(radius_meters)

        hits: List[PlaceHit] = []
        for place in await self._places():
            if type_filter is not None and place.type != type_filter:
                continue
            dist = distance_meters(center, place.coordinate)
            if dist <= radius_meters:
                hits.append((place, dist))

        hits.sort(key=lambda hit: (hit[1], hit[0].id))
        for hit in hits:
            yield hit

    async def query(
        self,
        center: Coordinate,
        radius_meters: float,
        type_filter: Optional[PlaceType] = None,
        limit: Optional[int] = None,
    ) -> List[PlaceHit]:
        results: List[PlaceHit] = []
        async for hit in self.iter_nearby(center, radius_meters, type_filter):
            if limit is not None and len(results) >= limit:
                break
            results.append(hit)
        return results

    async def add(self, draft: PlaceDraft) -> Place:
        """Store a submitted place.

        Duplicate submissions are not merged; each becomes its own entry.
        """
        if not draft.name or not draft.name.strip():
            raise ValidationError("Place name is required.", field="name")
        if draft.type is None:
            raise ValidationError("Place type is required.", field="type")
        if draft.coordinate is None:
            raise ValidationError("Place coordinate is required.", field="coordinate")

        place = Place(
            id=str(uuid.uuid4()),
            name=draft.name.strip(),
            type=draft.type,
            coordinate=draft.coordinate,
            address=draft.address or "",
            phone=draft.phone,
            rating=0.0,
            is_open=True if draft.is_open is None else draft.is_open,
            verified=False,
        )
        await self.store.insert(PLACES, place.id, place.model_dump(mode="json"))
        logger.info("place_added", place_id=place.id, place_type=place.type.value)
        return place

    async def load_seed(self, file_path: str) -> int:
        """Load seed places into an empty place set. Returns how many were loaded."""
        if await self.store.count(PLACES):
            logger.info("place_seed_skipped", reason="place set not empty")
            return 0
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            seeded = [Place.model_validate(item) for item in data.get("places", [])]
        except OSError as e:
            logger.error("place_seed_unreadable", path=file_path, error=str(e))
            return 0
        except (ValueError, PydanticValidationError) as e:
            logger.error("place_seed_invalid", path=file_path, error=str(e))
            return 0

        for place in seeded:
            await self.store.insert(PLACES, place.id, place.model_dump(mode="json"))
        logger.info("place_seed_loaded", count=len(seeded), path=file_path)
        return len(seeded)

"""Record store used by every service.

Record sets are append/insert-mostly: nothing in the service updates or deletes
a record. Two backends share the same small async API: an in-memory store for
development and tests, and a Redis store (one hash per record set, JSON values).
"""
import copy
import json
from typing import Any, Dict, List, Optional, Protocol

import structlog
from redis.asyncio import Redis

from wayguard.core.config import settings
from wayguard.core.errors import DependencyError

logger = structlog.get_logger(__name__)

PLACES = "places"
INCIDENT_REPORTS = "incident_reports"
SAFETY_ZONES = "safety_zones"
USER_LOCATIONS = "user_locations"
EMERGENCY_CONTACTS = "emergency_contacts"

Record = Dict[str, Any]


class RecordStore(Protocol):
    backend: str

    async def insert(self, table: str, record_id: str, record: Record) -> None: ...
    async def all(self, table: str) -> List[Record]: ...
    async def count(self, table: str) -> int: ...
    async def close(self) -> None: ...


class InMemoryRecordStore:
    backend = "memory"

    def __init__(self):
        self._tables: Dict[str, Dict[str, Record]] = {}

    async def insert(self, table: str, record_id: str, record: Record) -> None:
        self._tables.setdefault(table, {})[record_id] = copy.deepcopy(record)

    async def all(self, table: str) -> List[Record]:
        return [copy.deepcopy(r) for r in self._tables.get(table, {}).values()]

    async def count(self, table: str) -> int:
        return len(self._tables.get(table, {}))

    async def close(self) -> None:
        pass


class RedisRecordStore:
    backend = "redis"

    def __init__(self, redis_client: Optional[Redis] = None, url: Optional[str] = settings.REDIS_URL):
        if redis_client is None:
            if not url:
                raise ValueError("REDIS_URL is not set in the environment")
            redis_client = Redis.from_url(url, decode_responses=True)
        self._redis = redis_client

    @staticmethod
    def _key(table: str) -> str:
        return f"wayguard:{table}"

    async def insert(self, table: str, record_id: str, record: Record) -> None:
        try:
            await self._redis.hset(self._key(table), record_id, json.dumps(record))
        except Exception as e:
            logger.error("store_insert_error", table=table, record_id=record_id, error=str(e))
            raise DependencyError("Record store is unavailable.") from e

    async def all(self, table: str) -> List[Record]:
        try:
            raw_values = await self._redis.hvals(self._key(table))
        except Exception as e:
            logger.error("store_read_error", table=table, error=str(e))
            raise DependencyError("Record store is unavailable.") from e
        records = []
        for raw in raw_values:
            try:
                records.append(json.loads(raw))
            except ValueError:
                logger.error("store_parse_error", table=table, raw_value=str(raw)[:200])
        return records

    async def count(self, table: str) -> int:
        try:
            return int(await self._redis.hlen(self._key(table)))
        except Exception as e:
            logger.error("store_count_error", table=table, error=str(e))
            raise DependencyError("Record store is unavailable.") from e

    async def close(self) -> None:
        await self._redis.aclose()


def create_record_store() -> RecordStore:
    """Redis when enabled and configured, otherwise in-memory."""
    if settings.ENABLE_REDIS and settings.REDIS_URL:
        logger.info("record_store_selected", backend="redis")
        return RedisRecordStore(url=settings.REDIS_URL)
    logger.info("record_store_selected", backend="memory")
    return InMemoryRecordStore()

import uuid
from typing import List, Optional

import structlog

from wayguard.core.errors import Unauthenticated, ValidationError
from wayguard.models.domain import EmergencyContact
from wayguard.services.record_store import EMERGENCY_CONTACTS, RecordStore

logger = structlog.get_logger(__name__)


class ContactDirectory:
    """A user's emergency contacts. Read by dispatch only to count them."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def _for_user(self, user_id: str) -> List[EmergencyContact]:
        return [
            EmergencyContact.model_validate(record)
            for record in await self.store.all(EMERGENCY_CONTACTS)
            if record.get("user_id") == user_id
        ]

    async def list_for_user(self, user_id: Optional[str]) -> List[EmergencyContact]:
        if not user_id:
            raise Unauthenticated("Authentication required")
        contacts = await self._for_user(user_id)
        # Primary contacts first, then oldest first
        contacts.sort(key=lambda c: (not c.is_primary, c.created_at, c.id))
        return contacts

    async def count_for_user(self, user_id: str) -> int:
        return len(await self._for_user(user_id))

    async def add(
        self,
        user_id: Optional[str],
        name: Optional[str],
        phone: Optional[str],
        relationship: Optional[str] = None,
        is_primary: bool = False,
    ) -> EmergencyContact:
        if not user_id:
            raise Unauthenticated("Authentication required")
        if not name or not name.strip():
            raise ValidationError("Contact name is required.", field="name")
        if not phone or not phone.strip():
            raise ValidationError("Contact phone is required.", field="phone")

        contact = EmergencyContact(
            id=str(uuid.uuid4()),
            user_id=user_id,
            name=name.strip(),
            phone=phone.strip(),
            relationship=relationship,
            is_primary=is_primary,
        )
        await self.store.insert(EMERGENCY_CONTACTS, contact.id, contact.model_dump(mode="json"))
        logger.info("emergency_contact_added", user_id=user_id, contact_id=contact.id)
        return contact

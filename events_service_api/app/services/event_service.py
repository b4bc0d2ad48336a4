"""
Business logic for events.

Events are stored in the ``events`` document collection.  Beyond the
per-field rules checked by the validator, an event's dates must be in
order: it cannot end before it starts, and a repeating event cannot
stop repeating before its first occurrence has ended.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.db import Collection
from ..core.validation import FieldDescriptor, FieldError, PayloadValidationError, validate_payload
from ..schemas.event import EventRead
from .errors import EmptyUpdateError


logger = logging.getLogger(__name__)

EVENTS_COLLECTION = "events"
VISIBILITY_OPTIONS = ("public", "subscribers", "private")
INVALID_EVENT = "Invalid event payload."


def _event_schema(required: bool) -> List[FieldDescriptor]:
    return [
        FieldDescriptor("ownerID", "ownerId", required=required),
        FieldDescriptor("visibility", "options", required=required, options=VISIBILITY_OPTIONS),
        FieldDescriptor("googlePoint", "string", required=required),
        FieldDescriptor("description", "string", required=required),
        FieldDescriptor("datetime_start", "date", required=required),
        FieldDescriptor("datetime_end", "date", required=required),
        FieldDescriptor("period", "date", required=required),
        FieldDescriptor("repeatUntil", "date", required=required),
    ]


CREATE_EVENT_SCHEMA = _event_schema(required=True)
UPDATE_EVENT_SCHEMA = _event_schema(required=False)


def _as_datetime(value: Any) -> datetime:
    # Stored documents hold ISO strings, freshly validated ones datetimes.
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def check_schedule(event: Dict[str, Any]) -> None:
    """Raise ``PayloadValidationError`` if the event dates are out of order.

    Only the first violated rule is reported, mirroring the order in
    which a client would have to fix them.
    """
    start = _as_datetime(event["datetime_start"])
    end = _as_datetime(event["datetime_end"])
    repeat_until = _as_datetime(event["repeatUntil"])

    if end < start:
        error = FieldError("datetime_end", "datetime_end must be greater than datetime_start.")
    elif repeat_until < start:
        error = FieldError("repeatUntil", "repeatUntil must be greater than datetime_start.")
    elif repeat_until < end:
        error = FieldError("repeatUntil", "repeatUntil must be on or after datetime_end.")
    else:
        return
    raise PayloadValidationError(INVALID_EVENT, [error])


def _collection() -> Collection:
    return Collection(EVENTS_COLLECTION)


class EventService:
    """Operations on the ``events`` collection."""

    @classmethod
    async def create_event(cls, body: Any, current_user: Optional[dict] = None) -> EventRead:
        """Validate ``body`` and insert a new event."""
        document = validate_payload(CREATE_EVENT_SCHEMA, body, INVALID_EVENT)
        check_schedule(document)
        event_id = _collection().insert_one(document)
        logger.info(
            "User %s created event %s",
            current_user.get("user_id") if current_user else "anonymous",
            event_id,
        )
        document["_id"] = event_id
        return EventRead.from_document(document)

    @classmethod
    async def list_events(
        cls,
        owner_id: Optional[str] = None,
        visibility: Optional[str] = None,
    ) -> List[EventRead]:
        """Return events, optionally only those of one owner or visibility."""
        filters: Dict[str, Any] = {}
        if owner_id:
            filters["ownerID"] = owner_id
        if visibility:
            filters["visibility"] = visibility
        return [EventRead.from_document(doc) for doc in _collection().find(filters)]

    @classmethod
    async def get_event(cls, event_id: str) -> EventRead:
        """Retrieve a single event.  Raises ``ValueError`` if missing."""
        doc = _collection().find_one(event_id)
        if not doc:
            raise ValueError("Event not found.")
        return EventRead.from_document(doc)

    @classmethod
    async def update_event(cls, event_id: str, body: Any) -> EventRead:
        """Update fields of an existing event.

        Only fields present in ``body`` are changed.  The date rules are
        checked against the event as it would look after the update.
        """
        updates = validate_payload(UPDATE_EVENT_SCHEMA, body, INVALID_EVENT)
        if not updates:
            raise EmptyUpdateError()

        events = _collection()
        current = events.find_one(event_id)
        if not current:
            raise ValueError("Event not found.")
        check_schedule({**current, **updates})

        if not events.update_one(event_id, updates):
            raise ValueError("Event not found.")
        logger.info("Updated event %s fields %s", event_id, sorted(updates))
        return await cls.get_event(event_id)

    @classmethod
    async def delete_event(cls, event_id: str) -> None:
        if not _collection().delete_one(event_id):
            raise ValueError("Event not found.")
        logger.info("Deleted event %s", event_id)

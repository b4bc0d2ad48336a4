"""
Business logic for users.

Users live in the ``users`` document collection.  They are created
either through the API or on first Google login, and may subscribe to
other users by listing their ids in ``subscribedTo``.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from ..core.db import Collection
from ..core.validation import FieldDescriptor, validate_payload
from ..schemas.user import UserRead
from .errors import DuplicateEmailError, EmptyUpdateError


logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"

CREATE_USER_SCHEMA = [
    FieldDescriptor("firstName", "string", required=True),
    FieldDescriptor("lastName", "string", required=True),
    FieldDescriptor("email", "email", required=True),
    FieldDescriptor("avatar", "string"),
    FieldDescriptor("subscribedTo", "ownerId", required=True, many=True),
]

UPDATE_USER_SCHEMA = [
    FieldDescriptor("firstName", "string"),
    FieldDescriptor("lastName", "string"),
    FieldDescriptor("avatar", "string"),
    FieldDescriptor("email", "email"),
    FieldDescriptor("subscribedTo", "ownerId", many=True),
]


def _collection() -> Collection:
    return Collection(USERS_COLLECTION)


class UserService:
    """Operations on the ``users`` collection."""

    @classmethod
    async def create_user(cls, body: Any) -> UserRead:
        """Validate ``body`` and insert a new user.

        Raises ``PayloadValidationError`` for a malformed body and
        ``DuplicateEmailError`` if the email is already registered.
        """
        data = validate_payload(CREATE_USER_SCHEMA, body, "Invalid user payload.")
        users = _collection()
        if users.find_first({"email": data["email"]}):
            raise DuplicateEmailError(data["email"])

        document = dict(data)
        document["createdAt"] = datetime.now(timezone.utc)
        user_id = users.insert_one(document)
        logger.info("Created user %s (%s)", user_id, data["email"])
        document["_id"] = user_id
        return UserRead.from_document(document)

    @classmethod
    async def list_users(cls) -> List[UserRead]:
        return [UserRead.from_document(doc) for doc in _collection().find()]

    @classmethod
    async def get_user(cls, user_id: str) -> UserRead:
        """Return one user.  Raises ``ValueError`` if it does not exist."""
        doc = _collection().find_one(user_id)
        if not doc:
            raise ValueError("User not found.")
        return UserRead.from_document(doc)

    @classmethod
    async def update_user(cls, user_id: str, body: Any) -> UserRead:
        """Apply a partial update to a user.

        Only fields present in ``body`` are changed.  An update that
        names no known field raises ``EmptyUpdateError``; changing the
        email to one owned by another user raises ``DuplicateEmailError``.
        """
        updates = validate_payload(UPDATE_USER_SCHEMA, body, "Invalid user payload.")
        if not updates:
            raise EmptyUpdateError()

        users = _collection()
        if "email" in updates:
            existing = users.find_first({"email": updates["email"]})
            if existing and existing["_id"] != user_id:
                raise DuplicateEmailError(updates["email"])

        if not users.update_one(user_id, updates):
            raise ValueError("User not found.")
        logger.info("Updated user %s fields %s", user_id, sorted(updates))
        return await cls.get_user(user_id)

    @classmethod
    async def delete_user(cls, user_id: str) -> None:
        if not _collection().delete_one(user_id):
            raise ValueError("User not found.")
        logger.info("Deleted user %s", user_id)

    @classmethod
    def upsert_google_user(cls, profile: Dict[str, Any]) -> str:
        """Return the id of the user behind a Google profile.

        Users are matched by ``googleId`` first, then by email so that an
        account created through the API is linked on its first Google
        login.  Unknown profiles become new users.
        """
        users = _collection()
        google_id = str(profile["sub"])
        existing = users.find_first({"googleId": google_id})
        if existing:
            return existing["_id"]

        email = profile.get("email")
        if email:
            existing = users.find_first({"email": email})
            if existing:
                users.update_one(existing["_id"], {"googleId": google_id})
                logger.info("Linked Google account to user %s", existing["_id"])
                return existing["_id"]

        user_id = users.insert_one(
            {
                "googleId": google_id,
                "email": email,
                "firstName": profile.get("given_name"),
                "lastName": profile.get("family_name"),
                "avatar": profile.get("picture"),
                "subscribedTo": [],
                "createdAt": datetime.now(timezone.utc),
            }
        )
        logger.info("Registered user %s from Google login", user_id)
        return user_id

"""
Credential store — async repository over the `users` collection.

Uniqueness of usernames and of (email, provider) / (provider_id, provider) is
enforced by unique indexes created in ensure_indexes(). The existence checks
in AuthService only produce nicer error messages; two concurrent signups that
both pass the check are still serialised by the index, and the loser gets a
DuplicateIdentityError from create().
"""

from __future__ import annotations

from typing import Optional

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from schemas.models.base import parse_object_id
from schemas.models.user import AuthProvider, PendingToken, UserDoc
from shared.datetime_utils import utcnow
from shared.logging import get_logger

log = get_logger(__name__)

USERS_COLLECTION = "users"
VERIFICATION_SLOT = "email_verification"
RESET_SLOT = "password_reset"

_IDENTITY_FIELDS = ("provider_id", "username", "email")


class DuplicateIdentityError(Exception):
    """A unique index rejected the write; *field* names the colliding key."""

    def __init__(self, field: str) -> None:
        super().__init__(f"duplicate {field}")
        self.field = field


def _duplicate_field(exc: DuplicateKeyError) -> str:
    details = exc.details or {}
    key_pattern = details.get("keyPattern") or {}
    for field in _IDENTITY_FIELDS:
        if field in key_pattern:
            return field
    message = str(exc)
    for field in _IDENTITY_FIELDS:
        if f"{field}_" in message or f"{field}:" in message:
            return field
    return "identity"


def _active_slot_query(user_id, slot: str, token_hash: str) -> dict:
    query = {f"{slot}.token_hash": token_hash, f"{slot}.expires_at": {"$gt": utcnow()}}
    if user_id is not None:
        query["_id"] = ObjectId(user_id)
    return query


class UserRepository:
    def __init__(self, db) -> None:
        self._col = db[USERS_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._col.create_index([("username", ASCENDING)], unique=True)
        await self._col.create_index(
            [("email", ASCENDING), ("provider", ASCENDING)],
            unique=True,
            partialFilterExpression={"email": {"$type": "string"}},
        )
        await self._col.create_index(
            [("provider_id", ASCENDING), ("provider", ASCENDING)],
            unique=True,
            partialFilterExpression={"provider_id": {"$type": "string"}},
        )
        await self._col.create_index(
            [("email_verification.token_hash", ASCENDING)], sparse=True
        )
        await self._col.create_index(
            [("password_reset.token_hash", ASCENDING)], sparse=True
        )

    async def find_by_id(self, user_id) -> Optional[UserDoc]:
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        return UserDoc.from_mongo(await self._col.find_one({"_id": oid}))

    async def find_by_email_or_username(
        self, email: str, username: str
    ) -> Optional[UserDoc]:
        """Return a user holding *email* or *username*.

        When different users hold each, the email holder wins.
        """
        cursor = self._col.find({"$or": [{"email": email}, {"username": username}]})
        docs = await cursor.to_list(length=2)
        if not docs:
            return None
        for doc in docs:
            if doc.get("email") == email:
                return UserDoc.from_mongo(doc)
        return UserDoc.from_mongo(docs[0])

    async def find_by_email(
        self, email: str, provider: AuthProvider = AuthProvider.LOCAL
    ) -> Optional[UserDoc]:
        doc = await self._col.find_one({"email": email, "provider": provider.value})
        return UserDoc.from_mongo(doc)

    async def find_by_provider_identity(
        self, provider: AuthProvider, provider_id: str
    ) -> Optional[UserDoc]:
        doc = await self._col.find_one(
            {"provider_id": provider_id, "provider": provider.value}
        )
        return UserDoc.from_mongo(doc)

    async def find_oauth_user(
        self,
        provider: AuthProvider,
        email: Optional[str],
        provider_id: str,
    ) -> Optional[UserDoc]:
        """Match on (email, provider) or (provider_id, provider)."""
        clauses: list[dict] = [{"provider_id": provider_id, "provider": provider.value}]
        if email:
            clauses.insert(0, {"email": email, "provider": provider.value})
        doc = await self._col.find_one({"$or": clauses})
        return UserDoc.from_mongo(doc)

    async def find_by_verification_token_hash(self, token_hash: str) -> Optional[UserDoc]:
        doc = await self._col.find_one(
            _active_slot_query(None, VERIFICATION_SLOT, token_hash)
        )
        return UserDoc.from_mongo(doc)

    async def find_by_reset_token_hash(self, token_hash: str) -> Optional[UserDoc]:
        doc = await self._col.find_one(_active_slot_query(None, RESET_SLOT, token_hash))
        return UserDoc.from_mongo(doc)

    async def create(self, user: UserDoc) -> UserDoc:
        """Insert *user* and return it with its generated id.

        Raises:
            DuplicateIdentityError: a unique index rejected the insert.
        """
        data = user.to_mongo()
        try:
            result = await self._col.insert_one(data)
        except DuplicateKeyError as exc:
            field = _duplicate_field(exc)
            log.warning("user_create_duplicate", field=field, username=user.username)
            raise DuplicateIdentityError(field) from exc
        user.id = result.inserted_id
        return user

    # ── Token slots ──────────────────────────────────────────────────────────
    # Each write touches only the slot it owns (plus updated_at), so a slow
    # email send in one flow never rolls back fields written by another.

    async def _set_fields(self, query: dict, fields: dict) -> Optional[UserDoc]:
        fields["updated_at"] = utcnow()
        doc = await self._col.find_one_and_update(
            query, {"$set": fields}, return_document=ReturnDocument.AFTER
        )
        return UserDoc.from_mongo(doc)

    async def store_verification_token(
        self, user_id, pending: PendingToken
    ) -> Optional[UserDoc]:
        """Overwrite the verification slot; the previous token stops working."""
        return await self._set_fields(
            {"_id": ObjectId(user_id)}, {VERIFICATION_SLOT: pending.model_dump()}
        )

    async def store_reset_token(self, user_id, pending: PendingToken) -> Optional[UserDoc]:
        """Overwrite the password reset slot; the previous token stops working."""
        return await self._set_fields(
            {"_id": ObjectId(user_id)}, {RESET_SLOT: pending.model_dump()}
        )

    async def clear_reset_token(self, user_id, token_hash: str) -> bool:
        """Empty the reset slot only while it still holds *token_hash*."""
        result = await self._col.update_one(
            {"_id": ObjectId(user_id), f"{RESET_SLOT}.token_hash": token_hash},
            {"$set": {RESET_SLOT: None, "updated_at": utcnow()}},
        )
        return result.modified_count == 1

    async def mark_email_verified(self, user_id, token_hash: str) -> Optional[UserDoc]:
        """Consume the verification token and flag the email as verified.

        Returns None when the slot no longer holds an unexpired *token_hash*.
        """
        return await self._set_fields(
            _active_slot_query(user_id, VERIFICATION_SLOT, token_hash),
            {"is_email_verified": True, VERIFICATION_SLOT: None},
        )

    async def replace_password(
        self, user_id, token_hash: str, password_hash: str
    ) -> Optional[UserDoc]:
        """Consume the reset token and store the new argon2 hash.

        password_hash is written as given; hashing happens in
        UserDoc.set_password. Returns None when the token was already used
        or has expired.
        """
        return await self._set_fields(
            _active_slot_query(user_id, RESET_SLOT, token_hash),
            {"password_hash": password_hash, RESET_SLOT: None},
        )

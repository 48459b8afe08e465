"""
Identity administration: accounts, invitations and admin profiles

app/services/identity_admin.py

Identities live in `users` (email, password hash, invite token) and the
console profile in `profiles` under the same id. Every admin action is
written to `invite_logs`.
"""
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime
import logging
import re

from bson import ObjectId
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.errors import NotFoundError, PersistenceError, RequestError
from app.core.security import create_invite_token, get_password_hash, verify_password
from app.models.base import AdminAction
from app.models.profile import Profile
from app.services.catalog import serialize, to_object_id
from app.services.email_service import email_service

logger = logging.getLogger(__name__)


class IdentityAdmin:
    def __init__(self, db, mailer=None):
        self.db = db
        self.mailer = mailer or email_service

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def _insert_identity(self, email: str, **fields) -> ObjectId:
        now = datetime.utcnow()
        user_doc = {
            "email": email,
            "created_at": now,
            "updated_at": now,
            **fields,
        }
        try:
            result = await self.db.users.insert_one(user_doc)
        except DuplicateKeyError:
            raise RequestError("A user with this email address has already been registered")
        except PyMongoError as e:
            raise PersistenceError(str(e))
        return result.inserted_id

    async def create_user(self, email: str, password: str, role: Optional[str] = None,
                          is_admin: bool = False, reason: Optional[str] = None) -> str:
        """Create a confirmed account with a password"""
        await self._ensure_new_email(email)
        user_id = await self._insert_identity(
            email,
            password_hash=get_password_hash(password),
            is_active=True,
            confirmed_at=datetime.utcnow(),
        )
        await self._upsert_profile(user_id, email, role, is_admin, invited=False)
        await self._log(AdminAction.CREATE_USER, reason, email=email)
        logger.info(f"Created user {email} ({user_id})")
        return str(user_id)

    async def invite_user(self, email: str, role: Optional[str] = None,
                          is_admin: bool = False, reason: Optional[str] = None) -> Tuple[str, bool]:
        """
        Create a pending account and email an invitation link.

        Inviting an email whose account is still pending issues a fresh
        token and sends the invitation again; the profile is left as is.
        """
        existing = await self.db.users.find_one({"email": email})
        invite = create_invite_token()

        if existing:
            if existing.get("password_hash") or existing.get("is_active"):
                raise RequestError("A user with this email address has already been registered")
            user_id = existing["_id"]
            await self._refresh_invite(user_id, invite)
        else:
            user_id = await self._insert_identity(
                email,
                password_hash=None,
                is_active=False,
                invite_token=invite["token"],
                invite_token_expires=invite["expires"],
            )
            await self._upsert_profile(user_id, email, role, is_admin, invited=True)

        email_sent = await self.mailer.send_invite_email(email, invite["token"])
        await self._log(AdminAction.INVITE, reason, email=email)
        logger.info(f"Invited {email} ({user_id}), resent={existing is not None}, email_sent={email_sent}")
        return str(user_id), email_sent

    async def _refresh_invite(self, user_id: ObjectId, invite: Dict[str, Any]):
        try:
            await self.db.users.update_one(
                {"_id": user_id},
                {"$set": {
                    "invite_token": invite["token"],
                    "invite_token_expires": invite["expires"],
                    "updated_at": datetime.utcnow(),
                }},
            )
        except PyMongoError as e:
            raise PersistenceError(str(e))

    async def accept_invite(self, token: str, password: str) -> str:
        user = await self.db.users.find_one({
            "invite_token": token,
            "invite_token_expires": {"$gt": datetime.utcnow()},
        })
        if not user:
            raise RequestError("Invalid or expired invitation")

        await self.db.users.update_one(
            {"_id": user["_id"]},
            {
                "$set": {
                    "password_hash": get_password_hash(password),
                    "is_active": True,
                    "confirmed_at": datetime.utcnow(),
                    "updated_at": datetime.utcnow(),
                },
                "$unset": {"invite_token": "", "invite_token_expires": ""},
            },
        )
        return str(user["_id"])

    async def reset_password(self, user_id: str, new_password: str, reason: Optional[str] = None):
        user_oid = to_object_id(user_id, "user")
        result = await self.db.users.update_one(
            {"_id": user_oid},
            {"$set": {"password_hash": get_password_hash(new_password), "updated_at": datetime.utcnow()}},
        )
        if result.matched_count == 0:
            raise NotFoundError("User not found")
        await self._log(AdminAction.RESET_PASSWORD, reason, user_id=user_id)

    async def delete_user(self, user_id: str, reason: Optional[str] = None):
        user_oid = to_object_id(user_id, "user")
        result = await self.db.users.delete_one({"_id": user_oid})
        if result.deleted_count == 0:
            raise NotFoundError("User not found")
        await self._log(AdminAction.DELETE_USER, reason, user_id=user_id)
        try:
            await self.db.profiles.delete_one({"_id": user_oid})
        except PyMongoError as e:
            logger.warning(f"profiles delete error for {user_id}: {e}")

    async def authenticate(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        user = await self.db.users.find_one({"email": email.strip().lower(), "is_active": True})
        if not user or not user.get("password_hash"):
            return None
        if not verify_password(password, user["password_hash"]):
            return None
        return serialize(user)

    async def _ensure_new_email(self, email: str):
        if await self.db.users.find_one({"email": email}):
            raise RequestError("A user with this email address has already been registered")

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    async def _upsert_profile(self, user_id: ObjectId, email: str, role: Optional[str],
                              is_admin: bool, invited: bool):
        profile = Profile(email=email, role=role, is_admin=bool(is_admin), invited=invited)
        fields = profile.model_dump(exclude={"id", "created_at"})
        try:
            await self.db.profiles.update_one(
                {"_id": user_id},
                {"$set": fields, "$setOnInsert": {"created_at": profile.created_at}},
                upsert=True,
            )
        except PyMongoError as e:
            logger.warning(f"profiles upsert error: {e}")

    async def get_profile(self, user_id: str) -> Dict[str, Any]:
        profile = await self.db.profiles.find_one({"_id": to_object_id(user_id, "user")})
        if not profile:
            raise NotFoundError("User not found")
        return serialize(profile)

    async def list_profiles(self, search: Optional[str] = None, role: Optional[str] = None,
                            skip: int = 0, limit: int = 20) -> Tuple[List[Dict[str, Any]], int]:
        filters: Dict[str, Any] = {}
        if search and search.strip():
            pattern = re.compile(re.escape(search.strip()), re.IGNORECASE)
            filters["$or"] = [{"email": pattern}, {"role": pattern}]
        if role:
            filters["role"] = role.strip().lower()

        total = await self.db.profiles.count_documents(filters)
        cursor = self.db.profiles.find(filters).sort("created_at", -1).skip(skip).limit(limit)
        profiles = [serialize(doc) async for doc in cursor]
        return profiles, total

    async def update_profile(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        user_oid = to_object_id(user_id, "user")
        result = await self.db.profiles.update_one(
            {"_id": user_oid},
            {"$set": {**fields, "updated_at": datetime.utcnow()}},
        )
        if result.matched_count == 0:
            raise NotFoundError("User not found")
        return await self.get_profile(user_id)

    async def _log(self, action: AdminAction, reason: Optional[str],
                   user_id: Optional[str] = None, email: Optional[str] = None):
        """Audit entry; a failed write never fails the action"""
        entry = {
            "action": action.value,
            "reason": reason,
            "created_at": datetime.utcnow(),
        }
        if user_id:
            entry["user_id"] = user_id
        if email:
            entry["email"] = email
        try:
            await self.db.invite_logs.insert_one(entry)
        except PyMongoError as e:
            logger.warning(f"invite_logs insert error: {e}")

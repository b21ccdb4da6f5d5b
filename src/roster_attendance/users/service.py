from __future__ import annotations

import secrets
from typing import Any, Dict, Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..access.roles import is_admin, is_staff, parse_role
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Collection, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from ..platform.service import DataPlatform, FindResult
from .model import Actor
from .repository import UserRepository

# API field name -> entity attribute
_FIELD_MAP = {
    "email": "email",
    "firstName": "first_name",
    "lastName": "last_name",
    "role": "role",
    "active": "active",
    "isApproved": "is_approved",
    "parentId": "parent_id",
    "playerIds": "player_ids",
    "dateOfBirth": "date_of_birth",
    "phoneNumber": "phone_number",
}

# Only admins and trainers may toggle these, even on their own profile.
_STAFF_ONLY_FIELDS = frozenset({"active", "is_approved"})


def _role(actor: Optional[Actor]) -> Optional[Role]:
    return actor.role if actor else None


def _to_entity_fields(body: Mapping[str, Any]) -> Dict[str, Any]:
    return {_FIELD_MAP[k]: v for k, v in body.items() if k in _FIELD_MAP}


class AuthService:
    """Use case: authenticate an actor (login) and resolve the session actor."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> Actor:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")
        return user

    def resolve(self, user_id: Optional[int]) -> Optional[Actor]:
        """Session user id -> actor; unknown or inactive users count as anonymous."""
        if user_id is None:
            return None
        user = self._users.get_by_id(int(user_id))
        if not user or not user.active:
            return None
        return user


class UserService:
    """Use case: manage accounts through the data platform."""

    def __init__(self, platform: DataPlatform, users: UserRepository):
        self._platform = platform
        self._users = users

    def create_account(self, *, actor: Optional[Actor], body: Mapping[str, Any]) -> Actor:
        password = require_min_length(body.get("password") or "", "password", MIN_PASSWORD_LENGTH)
        data = _to_entity_fields(body)

        role = parse_role(data.get("role") or Role.PLAYER)
        if role == Role.ADMIN and not is_admin(_role(actor)):
            raise AuthorizationError("Only an admin can create admin accounts")
        if not is_staff(_role(actor)):
            for name in _STAFF_ONLY_FIELDS:
                data.pop(name, None)

        data["role"] = role
        data["password_hash"] = generate_password_hash(password)
        return self._platform.create(Collection.USERS, data, actor=actor)

    def get(self, *, actor: Optional[Actor], user_id: int) -> Actor:
        return self._platform.find_by_id(Collection.USERS, user_id, actor=actor)

    def list(self, *, actor: Optional[Actor], role: Optional[str] = None, limit: Optional[int] = None) -> FindResult:
        where = {"role": parse_role(role)} if role else {}
        return self._platform.find(Collection.USERS, actor=actor, where=where, limit=limit, sort="last_name")

    def update(self, *, actor: Optional[Actor], user_id: int, body: Mapping[str, Any]) -> Actor:
        data = _to_entity_fields(body)
        if not is_staff(_role(actor)):
            for name in _STAFF_ONLY_FIELDS:
                data.pop(name, None)
        if "role" in data and not is_admin(_role(actor)):
            raise AuthorizationError("Only an admin can change roles")
        if body.get("password"):
            password = require_min_length(body["password"], "password", MIN_PASSWORD_LENGTH)
            data["password_hash"] = generate_password_hash(password)
        return self._platform.update(Collection.USERS, user_id, data, actor=actor)

    def deactivate(self, *, actor: Optional[Actor], user_id: int) -> Actor:
        """Soft delete: inactive players are left out of future provisioning."""
        if not is_staff(_role(actor)):
            raise AuthorizationError("Only admins and trainers can deactivate accounts")
        return self._platform.update(Collection.USERS, user_id, {"active": False}, actor=actor)

    def delete(self, *, actor: Optional[Actor], user_id: int) -> Actor:
        return self._platform.delete(Collection.USERS, user_id, actor=actor)

    def reset_password(self, *, email: str, password: Optional[str] = None) -> str:
        """Maintenance use: set a new password; a random one is generated when omitted."""
        email = require_non_empty(email, "email").lower()
        user = self._users.get_by_email(email)
        if not user:
            raise NotFoundError(f"No user with email {email}")

        new_password = password or secrets.token_urlsafe(12)
        require_min_length(new_password, "password", MIN_PASSWORD_LENGTH)
        self._users.set_password(user.user_id, password_hash=generate_password_hash(new_password))
        return new_password

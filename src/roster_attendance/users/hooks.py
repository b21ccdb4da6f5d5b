from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Tuple

from ..access.roles import parse_role
from ..attendance.provisioning import AttendanceProvisioner
from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_int, require_non_empty
from ..core.enums import Collection, Operation, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..platform.hooks import HookContext, HookRegistry, HookStage
from .repository import UserRepository

_REQUIRED_ON_CREATE = (("email", "email"), ("first_name", "firstName"), ("last_name", "lastName"))


class UserHooks:
    def __init__(self, users: UserRepository, provisioner: AttendanceProvisioner):
        self._users = users
        self._provisioner = provisioner

    def register(self, registry: HookRegistry) -> None:
        registry.register(Collection.USERS, HookStage.BEFORE_VALIDATE, self.before_validate)
        registry.register(Collection.USERS, HookStage.AFTER_CHANGE, self.after_change)
        registry.register(Collection.USERS, HookStage.AFTER_READ, self.after_read)

    def _player_ids(self, raw: Iterable[Any]) -> Tuple[int, ...]:
        ids = tuple(dict.fromkeys(require_int(x, "playerIds") for x in (raw or ())))
        for player_id in ids:
            player = self._users.get_by_id(player_id)
            if player is None or player.role != Role.PLAYER:
                raise ValidationError(f"playerIds: {player_id} is not a player")
        return ids

    def before_validate(self, ctx: HookContext):
        data = dict(ctx.data)
        if ctx.operation == Operation.CREATE:
            for key, label in _REQUIRED_ON_CREATE:
                data[key] = require_non_empty(data.get(key), label)
            data["role"] = parse_role(data.get("role") or Role.PLAYER)
            data.setdefault("active", True)
            data.setdefault("is_approved", True)
        elif "role" in data:
            data["role"] = parse_role(data["role"])

        if "email" in data:
            email = require_non_empty(data["email"], "email").lower()
            existing = self._users.get_by_email(email)
            if existing is not None and (ctx.original is None or existing.user_id != ctx.original.user_id):
                raise ValidationError("Email is already registered")
            data["email"] = email

        if data.get("date_of_birth") and not isinstance(data["date_of_birth"], date):
            data["date_of_birth"] = parse_iso_date(str(data["date_of_birth"]), "dateOfBirth")

        role = data.get("role") or (ctx.original.role if ctx.original is not None else None)
        if "player_ids" in data:
            if role != Role.PARENT and data["player_ids"]:
                raise ValidationError("Only parent accounts can be linked to players")
            data["player_ids"] = self._player_ids(data["player_ids"])
        if data.get("parent_id") is not None:
            if role != Role.PLAYER:
                raise ValidationError("Only player accounts can have a parent")
            parent = self._users.get_by_id(require_int(data["parent_id"], "parentId"))
            if parent is None or parent.role != Role.PARENT:
                raise ValidationError("parentId must reference a parent account")
            data["parent_id"] = parent.user_id
        return data

    def after_change(self, ctx: HookContext):
        doc = ctx.doc
        if ctx.operation == Operation.CREATE and doc.role == Role.PLAYER and doc.active:
            self._provisioner.provision_for_player(doc, actor_id=ctx.actor_id)
        return None

    def after_read(self, ctx: HookContext):
        if ctx.role != Role.PARENT:
            return None

        # Links come from storage, not the session actor, so mid-session changes apply.
        parent = self._users.get_by_id(int(ctx.actor_id))
        visible = {ctx.actor_id, *(parent.player_ids if parent else ())}
        if ctx.single:
            if ctx.docs and ctx.docs[0].user_id not in visible:
                raise AuthorizationError("Access denied")
            return None
        return [u for u in ctx.docs if u.user_id in visible]

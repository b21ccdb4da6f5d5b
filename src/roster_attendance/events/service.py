from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from ..common.validators import parse_enum
from ..core.enums import Collection, EventType
from ..core.exceptions import AuthenticationError
from ..platform.service import DataPlatform, FindResult
from ..users.model import Actor
from .lock_guard import check_lock_toggle
from .model import Event

# API field name -> entity attribute
_FIELD_MAP = {
    "name": "name",
    "date": "date",
    "location": "location",
    "type": "type",
    "description": "description",
    "locked": "locked",
}


def _to_entity_fields(body: Mapping[str, Any]) -> Dict[str, Any]:
    return {_FIELD_MAP[k]: v for k, v in body.items() if k in _FIELD_MAP}


class EventService:
    def __init__(self, platform: DataPlatform):
        self._platform = platform

    def create(self, *, actor: Optional[Actor], body: Mapping[str, Any]) -> Event:
        return self._platform.create(Collection.EVENTS, _to_entity_fields(body), actor=actor)

    def get(self, *, actor: Optional[Actor], event_id: int) -> Event:
        return self._platform.find_by_id(Collection.EVENTS, event_id, actor=actor)

    def list(
        self,
        *,
        actor: Optional[Actor],
        event_type: Optional[str] = None,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
    ) -> FindResult:
        where = {"type": parse_enum(EventType, event_type, "type")} if event_type else {}
        return self._platform.find(Collection.EVENTS, actor=actor, where=where, limit=limit, sort=sort or "date")

    def update(self, *, actor: Optional[Actor], event_id: int, body: Mapping[str, Any]) -> Event:
        return self._platform.update(Collection.EVENTS, event_id, _to_entity_fields(body), actor=actor)

    def delete(self, *, actor: Optional[Actor], event_id: int) -> Event:
        return self._platform.delete(Collection.EVENTS, event_id, actor=actor)

    def set_locked(self, *, actor: Optional[Actor], event_id: int, locked: bool) -> Event:
        """Lock or unlock an event.

        Trainers get past the toggle gate either way, but unlocking is an edit
        of a locked event, which the update guard reserves for admins.
        """
        if actor is None:
            raise AuthenticationError("Unauthorized")
        check_lock_toggle(actor.role)
        return self._platform.update(Collection.EVENTS, event_id, {"locked": bool(locked)}, actor=actor)

    def lock(self, *, actor: Optional[Actor], event_id: int) -> Event:
        return self.set_locked(actor=actor, event_id=event_id, locked=True)

    def unlock(self, *, actor: Optional[Actor], event_id: int) -> Event:
        return self.set_locked(actor=actor, event_id=event_id, locked=False)

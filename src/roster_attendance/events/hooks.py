from __future__ import annotations

from datetime import datetime

from ..attendance.provisioning import AttendanceProvisioner
from ..common.datetime_utils import as_utc, parse_iso_datetime
from ..common.validators import parse_enum, require_non_empty
from ..core.enums import Collection, EventType, Operation
from ..core.exceptions import ValidationError
from ..platform.hooks import HookContext, HookRegistry, HookStage
from .lock_guard import check_event_delete, check_event_update

_REQUIRED_ON_CREATE = (("name", "name"), ("location", "location"))


class EventHooks:
    def __init__(self, provisioner: AttendanceProvisioner):
        self._provisioner = provisioner

    def register(self, registry: HookRegistry) -> None:
        registry.register(Collection.EVENTS, HookStage.BEFORE_VALIDATE, self.before_validate)
        registry.register(Collection.EVENTS, HookStage.BEFORE_CHANGE, self.before_change)
        registry.register(Collection.EVENTS, HookStage.AFTER_CHANGE, self.after_change)
        registry.register(Collection.EVENTS, HookStage.BEFORE_DELETE, self.before_delete)

    def before_validate(self, ctx: HookContext):
        data = dict(ctx.data)
        if ctx.operation == Operation.CREATE:
            for key, label in _REQUIRED_ON_CREATE:
                data[key] = require_non_empty(data.get(key), label)
            if data.get("date") is None:
                raise ValidationError("Missing date")
            data.setdefault("type", EventType.PRACTICE)
            data.setdefault("locked", False)
        else:
            for key, label in _REQUIRED_ON_CREATE:
                if key in data:
                    data[key] = require_non_empty(data[key], label)

        if "date" in data:
            value = data["date"]
            data["date"] = as_utc(value) if isinstance(value, datetime) else parse_iso_datetime(str(value), "date")
        if "type" in data:
            data["type"] = parse_enum(EventType, data["type"], "type")
        if "locked" in data:
            data["locked"] = bool(data["locked"])
        return data

    def before_change(self, ctx: HookContext):
        if ctx.operation == Operation.UPDATE:
            check_event_update(ctx.role, ctx.original, ctx.data)
        return None

    def after_change(self, ctx: HookContext):
        if ctx.operation == Operation.CREATE:
            self._provisioner.provision_for_event(ctx.doc, actor_id=ctx.actor_id)
        return None

    def before_delete(self, ctx: HookContext):
        check_event_delete(ctx.original)
        return None

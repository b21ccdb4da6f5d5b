"""Access policy: per-collection read/create/update/delete decisions.

``decide`` is a pure function of ``(role, actor id, collection, operation)``.
It never returns a bare boolean: a decision is ``allow``, ``deny`` or a
``scoped`` equality filter the data platform applies to the rows involved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ..core.enums import Collection, Operation, Role
from .roles import Capability, has_capability


class DecisionKind(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    SCOPED = "scoped"


@dataclass(frozen=True)
class AccessDecision:
    kind: DecisionKind
    scope: Mapping[str, Any] = field(default_factory=dict)
    # Rows are allowed through the query but narrowed by an after-read hook.
    post_read_filter: bool = False

    @classmethod
    def allow(cls, *, post_read_filter: bool = False) -> "AccessDecision":
        return cls(DecisionKind.ALLOW, post_read_filter=post_read_filter)

    @classmethod
    def deny(cls) -> "AccessDecision":
        return cls(DecisionKind.DENY)

    @classmethod
    def scoped(cls, **scope: Any) -> "AccessDecision":
        return cls(DecisionKind.SCOPED, scope=dict(scope))

    @property
    def allowed(self) -> bool:
        return self.kind != DecisionKind.DENY

    def matches(self, row: Any) -> bool:
        """Whether an entity (dataclass or mapping) falls inside the scope."""
        if self.kind == DecisionKind.DENY:
            return False
        for key, expected in self.scope.items():
            actual = row.get(key) if isinstance(row, Mapping) else getattr(row, key, None)
            if actual != expected:
                return False
        return True

    def apply_to(self, where: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
        """AND the scope into a query filter.

        Returns None when the two can never match (same key, different value).
        """
        merged: Dict[str, Any] = dict(where or {})
        for key, expected in self.scope.items():
            if key in merged and merged[key] != expected:
                return None
            merged[key] = expected
        return merged


def _allow_if(condition: bool) -> AccessDecision:
    return AccessDecision.allow() if condition else AccessDecision.deny()


def _decide_users(role: Optional[Role], actor_id: Optional[int], operation: Operation) -> AccessDecision:
    if operation == Operation.CREATE:
        # Registration is open; which roles may be created is checked by the user service.
        return AccessDecision.allow()
    if role is None:
        return AccessDecision.deny()
    if operation == Operation.READ:
        if has_capability(role, Capability.READ_ALL):
            return AccessDecision.allow()
        if has_capability(role, Capability.RESPOND_CHILDREN):
            # Own profile plus linked children, narrowed by an after-read hook.
            return AccessDecision.allow(post_read_filter=True)
        return AccessDecision.scoped(user_id=actor_id)
    if operation == Operation.UPDATE:
        # Trainers only edit their own profile for now.
        if has_capability(role, Capability.MANAGE_USERS):
            return AccessDecision.allow()
        return AccessDecision.scoped(user_id=actor_id)
    if operation == Operation.DELETE:
        return _allow_if(has_capability(role, Capability.MANAGE_USERS))
    return AccessDecision.deny()


def _decide_events(role: Optional[Role], operation: Operation) -> AccessDecision:
    if operation == Operation.READ:
        return AccessDecision.allow()
    if operation in (Operation.CREATE, Operation.UPDATE):
        return _allow_if(has_capability(role, Capability.MANAGE_EVENTS))
    if operation == Operation.DELETE:
        return _allow_if(has_capability(role, Capability.DELETE_RECORDS))
    return AccessDecision.deny()


def _decide_attendance(role: Optional[Role], actor_id: Optional[int], operation: Operation) -> AccessDecision:
    if role is None:
        return AccessDecision.deny()
    if operation in (Operation.READ, Operation.UPDATE):
        staff = Capability.READ_ALL if operation == Operation.READ else Capability.MARK_ATTENDANCE
        if has_capability(role, staff):
            return AccessDecision.allow()
        if has_capability(role, Capability.RESPOND_SELF):
            return AccessDecision.scoped(player_id=actor_id)
        if has_capability(role, Capability.RESPOND_CHILDREN):
            # Reads are narrowed after the fact; updates are checked by the before-change hook.
            return AccessDecision.allow(post_read_filter=operation == Operation.READ)
        return AccessDecision.deny()
    if operation == Operation.CREATE:
        # Records are normally created by the provisioner; staff may add one by hand.
        return _allow_if(has_capability(role, Capability.MARK_ATTENDANCE))
    if operation == Operation.DELETE:
        return _allow_if(has_capability(role, Capability.DELETE_RECORDS))
    return AccessDecision.deny()


def decide(
    role: Optional[Role],
    actor_id: Optional[int],
    collection: Collection,
    operation: Operation,
) -> AccessDecision:
    """Resolve the access decision for an actor (``role=None`` means anonymous)."""
    if collection == Collection.USERS:
        return _decide_users(role, actor_id, operation)
    if collection == Collection.EVENTS:
        return _decide_events(role, operation)
    if collection == Collection.ATTENDANCE:
        return _decide_attendance(role, actor_id, operation)
    return AccessDecision.deny()

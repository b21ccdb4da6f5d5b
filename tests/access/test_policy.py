from __future__ import annotations

import pytest

from roster_attendance.access.policy import AccessDecision, DecisionKind, decide
from roster_attendance.core.enums import Collection, Operation, Role

ACTOR_ID = 7


def _kind(role, collection, operation):
    return decide(role, ACTOR_ID, collection, operation).kind


@pytest.mark.parametrize(
    "role, operation, expected",
    [
        (Role.ADMIN, Operation.READ, DecisionKind.ALLOW),
        (Role.TRAINER, Operation.READ, DecisionKind.ALLOW),
        (Role.PLAYER, Operation.READ, DecisionKind.SCOPED),
        (Role.ADMIN, Operation.UPDATE, DecisionKind.ALLOW),
        (Role.TRAINER, Operation.UPDATE, DecisionKind.SCOPED),
        (Role.PLAYER, Operation.UPDATE, DecisionKind.SCOPED),
        (Role.PARENT, Operation.UPDATE, DecisionKind.SCOPED),
        (Role.ADMIN, Operation.DELETE, DecisionKind.ALLOW),
        (Role.TRAINER, Operation.DELETE, DecisionKind.DENY),
        (Role.PLAYER, Operation.DELETE, DecisionKind.DENY),
        (Role.PARENT, Operation.DELETE, DecisionKind.DENY),
    ],
)
def test_actor_table(role, operation, expected):
    assert _kind(role, Collection.USERS, operation) == expected


def test_actor_self_scope_is_an_equality_filter():
    decision = decide(Role.PLAYER, ACTOR_ID, Collection.USERS, Operation.READ)
    assert decision.scope == {"user_id": ACTOR_ID}


def test_parent_reads_actors_through_post_read_filter():
    decision = decide(Role.PARENT, ACTOR_ID, Collection.USERS, Operation.READ)
    assert decision.kind == DecisionKind.ALLOW
    assert decision.post_read_filter


@pytest.mark.parametrize("role", [None, Role.ADMIN, Role.TRAINER, Role.PLAYER, Role.PARENT])
def test_everyone_can_register_and_read_events(role):
    assert decide(role, None, Collection.USERS, Operation.CREATE).allowed
    assert decide(role, None, Collection.EVENTS, Operation.READ).allowed


@pytest.mark.parametrize(
    "role, create_update, delete",
    [
        (Role.ADMIN, True, True),
        (Role.TRAINER, True, False),
        (Role.PLAYER, False, False),
        (Role.PARENT, False, False),
        (None, False, False),
    ],
)
def test_event_table(role, create_update, delete):
    assert decide(role, ACTOR_ID, Collection.EVENTS, Operation.CREATE).allowed is create_update
    assert decide(role, ACTOR_ID, Collection.EVENTS, Operation.UPDATE).allowed is create_update
    assert decide(role, ACTOR_ID, Collection.EVENTS, Operation.DELETE).allowed is delete


def test_attendance_table():
    assert _kind(Role.ADMIN, Collection.ATTENDANCE, Operation.READ) == DecisionKind.ALLOW
    assert _kind(Role.TRAINER, Collection.ATTENDANCE, Operation.UPDATE) == DecisionKind.ALLOW

    own = decide(Role.PLAYER, ACTOR_ID, Collection.ATTENDANCE, Operation.READ)
    assert own.kind == DecisionKind.SCOPED and own.scope == {"player_id": ACTOR_ID}
    assert decide(Role.PLAYER, ACTOR_ID, Collection.ATTENDANCE, Operation.UPDATE).scope == {"player_id": ACTOR_ID}

    parent_read = decide(Role.PARENT, ACTOR_ID, Collection.ATTENDANCE, Operation.READ)
    assert parent_read.kind == DecisionKind.ALLOW and parent_read.post_read_filter
    parent_update = decide(Role.PARENT, ACTOR_ID, Collection.ATTENDANCE, Operation.UPDATE)
    assert parent_update.kind == DecisionKind.ALLOW and not parent_update.post_read_filter

    assert not decide(Role.PLAYER, ACTOR_ID, Collection.ATTENDANCE, Operation.CREATE).allowed
    assert not decide(Role.PARENT, ACTOR_ID, Collection.ATTENDANCE, Operation.CREATE).allowed
    assert decide(Role.TRAINER, ACTOR_ID, Collection.ATTENDANCE, Operation.CREATE).allowed
    assert decide(Role.ADMIN, ACTOR_ID, Collection.ATTENDANCE, Operation.DELETE).allowed
    assert not decide(Role.TRAINER, ACTOR_ID, Collection.ATTENDANCE, Operation.DELETE).allowed


@pytest.mark.parametrize("operation", list(Operation))
def test_anonymous_attendance_is_denied(operation):
    assert decide(None, None, Collection.ATTENDANCE, operation).kind == DecisionKind.DENY


def test_apply_to_merges_scope_and_detects_contradiction():
    decision = AccessDecision.scoped(player_id=3)
    assert decision.apply_to({"event_id": 1}) == {"event_id": 1, "player_id": 3}
    assert decision.apply_to({"player_id": 3}) == {"player_id": 3}
    assert decision.apply_to({"player_id": 4}) is None
    assert AccessDecision.allow().apply_to(None) == {}


def test_matches_works_on_mappings_and_objects():
    decision = AccessDecision.scoped(player_id=3)

    class Row:
        player_id = 3

    assert decision.matches({"player_id": 3})
    assert decision.matches(Row())
    assert not decision.matches({"player_id": 5})
    assert not AccessDecision.deny().matches({})

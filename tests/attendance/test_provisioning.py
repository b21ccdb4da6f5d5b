from __future__ import annotations

from datetime import timedelta

from roster_attendance.attendance.provisioning import AttendanceProvisioner
from roster_attendance.core.enums import AttendanceStatus, Role


def _provisioner(repos, now, **kw):
    return AttendanceProvisioner(repos.attendance, repos.users, repos.events, clock=lambda: now, **kw)


def _event(repos, now, *, days: int, name: str = "Practice"):
    return repos.events.create({"name": name, "date": now + timedelta(days=days), "location": "Field"})


def test_event_gets_one_pending_record_per_active_player(repos, make_user, now):
    players = [make_user(Role.PLAYER, n) for n in ("Ann", "Ben", "Cid")]
    make_user(Role.PLAYER, "Gone", active=False)
    make_user(Role.TRAINER, "Tom")
    make_user(Role.PARENT, "Pam")
    event = _event(repos, now, days=2)

    result = _provisioner(repos, now).provision_for_event(event, actor_id=42)

    records = repos.attendance.find(where={"event_id": event.event_id})
    assert len(result.created) == 3 and not result.failed and not result.skipped
    assert sorted(r.player_id for r in records) == sorted(p.user_id for p in players)
    assert all(r.status == AttendanceStatus.PENDING for r in records)
    assert all(r.updated_by == 42 and r.updated_at == now for r in records)


def test_unknown_actor_falls_back_to_event_id(repos, make_user, now):
    make_user(Role.PLAYER, "Ann")
    event = _event(repos, now, days=2)

    _provisioner(repos, now).provision_for_event(event)

    (record,) = repos.attendance.find(where={"event_id": event.event_id})
    assert record.updated_by == event.event_id


def test_new_player_gets_records_for_upcoming_events_only(repos, make_user, now):
    past = _event(repos, now, days=-1, name="Old")
    today = repos.events.create({"name": "Now", "date": now, "location": "Field"})
    future = _event(repos, now, days=5, name="Later")
    player = make_user(Role.PLAYER, "Ann")

    result = _provisioner(repos, now).provision_for_player(player)

    event_ids = {r.event_id for r in repos.attendance.find(where={"player_id": player.user_id})}
    assert event_ids == {today.event_id, future.event_id}
    assert past.event_id not in event_ids
    assert len(result.created) == 2
    assert all(r.updated_by == player.user_id for r in repos.attendance.find())


def test_fetch_limit_bounds_one_run(repos, make_user, now):
    for n in range(5):
        make_user(Role.PLAYER, f"P{n}")
    event = _event(repos, now, days=1)

    result = _provisioner(repos, now, fetch_limit=3).provision_for_event(event)

    assert len(result.created) == 3


def test_failure_on_one_pair_does_not_stop_the_rest(repos, make_user, now, caplog):
    ann = make_user(Role.PLAYER, "Ann")
    ben = make_user(Role.PLAYER, "Ben")
    event = _event(repos, now, days=1)
    repos.attendance.fail_for.add((event.event_id, ann.user_id))

    result = _provisioner(repos, now).provision_for_event(event)

    assert [r.player_id for r in repos.attendance.find()] == [ben.user_id]
    assert len(result.failed) == 1
    assert result.failed[0][:2] == (event.event_id, ann.user_id)
    assert "attendance provisioning failed" in caplog.text


def test_existing_pair_is_skipped_not_duplicated(repos, make_user, now):
    ann = make_user(Role.PLAYER, "Ann")
    event = _event(repos, now, days=1)
    provisioner = _provisioner(repos, now)

    provisioner.provision_for_event(event)
    again = provisioner.provision_for_player(ann)

    assert repos.attendance.count(where={"event_id": event.event_id, "player_id": ann.user_id}) == 1
    assert again.skipped == [(event.event_id, ann.user_id)]
    assert not again.created


def test_backfill_fills_only_missing_pairs(repos, make_user, now):
    ann = make_user(Role.PLAYER, "Ann")
    e1 = _event(repos, now, days=1)
    e2 = _event(repos, now, days=-10, name="Past")
    provisioner = _provisioner(repos, now)
    provisioner.provision_for_event(e1)
    ben = make_user(Role.PLAYER, "Ben")

    result = provisioner.backfill()

    assert len(result.created) == 3  # (e1, ben), (e2, ann), (e2, ben)
    assert len(result.skipped) == 1
    pairs = {(r.event_id, r.player_id) for r in repos.attendance.find()}
    assert pairs == {(e.event_id, p.user_id) for e in (e1, e2) for p in (ann, ben)}


def test_no_players_is_a_quiet_no_op(repos, now):
    event = _event(repos, now, days=1)

    result = _provisioner(repos, now).provision_for_event(event)

    assert result.total == 0

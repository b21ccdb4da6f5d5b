"""Cascade provisioning of attendance records.

A new event gets a pending record for every active player; a new player gets
a pending record for every upcoming event. Each record is an independent
write: failures are logged and reported, never raised, so the event or
player that triggered the cascade is always kept.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Tuple

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_CASCADE_FETCH_LIMIT, DEFAULT_CASCADE_MAX_WORKERS
from ..core.enums import AttendanceStatus
from ..events.model import Event
from ..events.repository import EventRepository
from ..users.model import Actor
from ..users.repository import UserRepository
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

Pair = Tuple[int, int]


@dataclass
class ProvisioningResult:
    created: List[int] = field(default_factory=list)
    skipped: List[Pair] = field(default_factory=list)
    failed: List[Tuple[int, int, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.created) + len(self.skipped) + len(self.failed)

    def merge(self, other: "ProvisioningResult") -> None:
        self.created.extend(other.created)
        self.skipped.extend(other.skipped)
        self.failed.extend(other.failed)


class AttendanceProvisioner:
    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        events: EventRepository,
        *,
        fetch_limit: int = DEFAULT_CASCADE_FETCH_LIMIT,
        max_workers: int = DEFAULT_CASCADE_MAX_WORKERS,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._users = users
        self._events = events
        self._fetch_limit = int(fetch_limit)
        self._max_workers = max(1, int(max_workers))
        self._clock = clock

    def _create_one(self, event_id: int, player_id: int, updated_by: int) -> Optional[int]:
        """Insert one pending record unless the (event, player) pair already has one."""
        existing = self._attendance.get_for_event_and_player(event_id=event_id, player_id=player_id)
        if existing is not None:
            return None

        record = self._attendance.create(
            {
                "event_id": event_id,
                "player_id": player_id,
                "status": AttendanceStatus.PENDING,
                "notes": None,
                "updated_by": updated_by,
                "updated_at": self._clock(),
            }
        )
        return record.attendance_id

    def _run(self, pairs: Iterable[Pair], updated_by: int) -> ProvisioningResult:
        result = ProvisioningResult()
        pairs = list(pairs)
        if not pairs:
            return result

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(pairs))) as ex:
            futures = {ex.submit(self._create_one, e, p, updated_by): (e, p) for e, p in pairs}
            for fut in as_completed(futures):
                event_id, player_id = futures[fut]
                try:
                    attendance_id = fut.result()
                except Exception as e:
                    logger.warning(
                        "attendance provisioning failed for event=%s player=%s: %s", event_id, player_id, e
                    )
                    result.failed.append((event_id, player_id, str(e)))
                    continue
                if attendance_id is None:
                    result.skipped.append((event_id, player_id))
                else:
                    result.created.append(attendance_id)
        return result

    def provision_for_event(self, event: Event, *, actor_id: Optional[int] = None) -> ProvisioningResult:
        """One pending record per active player for a newly created event."""
        try:
            players = self._users.list_active_players(limit=self._fetch_limit)
        except Exception as e:
            logger.warning("could not load players for event=%s: %s", event.event_id, e)
            return ProvisioningResult()

        updated_by = actor_id if actor_id is not None else event.event_id
        result = self._run(((event.event_id, p.user_id) for p in players), updated_by)
        logger.info(
            "provisioned event=%s: created=%d skipped=%d failed=%d",
            event.event_id, len(result.created), len(result.skipped), len(result.failed),
        )
        return result

    def provision_for_player(self, player: Actor, *, actor_id: Optional[int] = None) -> ProvisioningResult:
        """One pending record per event dated now or later for a newly created player."""
        try:
            events = self._events.list_upcoming(since=self._clock(), limit=self._fetch_limit)
        except Exception as e:
            logger.warning("could not load upcoming events for player=%s: %s", player.user_id, e)
            return ProvisioningResult()

        updated_by = actor_id if actor_id is not None else player.user_id
        result = self._run(((e.event_id, player.user_id) for e in events), updated_by)
        logger.info(
            "provisioned player=%s: created=%d skipped=%d failed=%d",
            player.user_id, len(result.created), len(result.skipped), len(result.failed),
        )
        return result

    def backfill(self, *, actor_id: Optional[int] = None) -> ProvisioningResult:
        """Fill in every missing (event, active player) pair."""
        events = self._events.find(where={}, limit=self._fetch_limit, sort="date")
        players = self._users.list_active_players(limit=self._fetch_limit)

        total = ProvisioningResult()
        for event in events:
            updated_by = actor_id if actor_id is not None else event.event_id
            total.merge(self._run(((event.event_id, p.user_id) for p in players), updated_by))
        logger.info(
            "backfill: events=%d players=%d created=%d skipped=%d failed=%d",
            len(events), len(players), len(total.created), len(total.skipped), len(total.failed),
        )
        return total

from __future__ import annotations

from typing import Optional, Protocol

from ..platform.repository import CollectionRepository
from .model import AttendanceRecord


class AttendanceRepository(CollectionRepository, Protocol):
    def get_for_event_and_player(self, *, event_id: int, player_id: int) -> Optional[AttendanceRecord]:
        """Look a record up by its natural key (event, player)."""

        raise NotImplementedError

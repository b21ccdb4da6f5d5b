from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from ..platform.repository import CollectionRepository
from .model import Event


class EventRepository(CollectionRepository, Protocol):
    def list_upcoming(self, *, since: datetime, limit: int) -> Sequence[Event]:
        """Events whose date is at or after ``since``, soonest first."""

        raise NotImplementedError

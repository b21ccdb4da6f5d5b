from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import EventType


@dataclass(frozen=True)
class Event:
    """Domain entity: a practice, game, tournament or meeting."""

    event_id: int
    name: str
    date: datetime
    location: str
    type: EventType = EventType.PRACTICE
    locked: bool = False
    description: Optional[str] = None

    def to_api(self) -> dict:
        return {
            "id": self.event_id,
            "name": self.name,
            "date": to_iso(self.date),
            "location": self.location,
            "type": self.type.value,
            "locked": self.locked,
            "description": self.description,
        }

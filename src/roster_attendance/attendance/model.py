from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..common.datetime_utils import to_iso
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one player's attendance for one event."""

    attendance_id: int
    event_id: int
    player_id: int
    status: AttendanceStatus
    updated_by: int
    updated_at: datetime
    notes: Optional[str] = None

    def to_api(self) -> dict:
        return {
            "id": self.attendance_id,
            "eventId": self.event_id,
            "playerId": self.player_id,
            "status": self.status.value,
            "notes": self.notes,
            "updatedBy": self.updated_by,
            "updatedAt": to_iso(self.updated_at),
        }


@dataclass(frozen=True)
class SummaryRow:
    """Read-model row used by the attendance summary."""

    attendance_id: int
    player_id: int
    player_name: str
    status: AttendanceStatus
    notes: Optional[str]
    updated_at: datetime
    updated_by: str

    def to_api(self) -> dict:
        return {
            "id": self.attendance_id,
            "playerId": self.player_id,
            "playerName": self.player_name,
            "status": self.status.value,
            "notes": self.notes,
            "updatedAt": to_iso(self.updated_at),
            "updatedBy": self.updated_by,
        }


@dataclass
class EventSummary:
    event_id: int
    event_name: str
    event_date: Optional[datetime]
    counts: dict = field(default_factory=lambda: {s.value: 0 for s in AttendanceStatus})
    records: List[SummaryRow] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.records)

    def add(self, row: SummaryRow) -> None:
        self.counts[row.status.value] = self.counts.get(row.status.value, 0) + 1
        self.records.append(row)

    def to_api(self) -> dict:
        return {
            "eventId": self.event_id,
            "eventName": self.event_name,
            "eventDate": to_iso(self.event_date),
            "total": self.total,
            **self.counts,
            "records": [r.to_api() for r in self.records],
        }

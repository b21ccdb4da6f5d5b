from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from ..core.enums import Role


@dataclass(frozen=True)
class Actor:
    """Domain entity: an account with exactly one role.

    Note: Plain data object (no DB access). ``parent_id`` is only meaningful
    for players, ``player_ids`` only for parents.
    """

    user_id: int
    email: str
    first_name: str
    last_name: str
    role: Role
    password_hash: str = ""
    active: bool = True
    is_approved: bool = True
    parent_id: Optional[int] = None
    player_ids: Tuple[int, ...] = ()
    date_of_birth: Optional[date] = None
    phone_number: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_api(self) -> dict:
        return {
            "id": self.user_id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role.value,
            "active": self.active,
            "isApproved": self.is_approved,
            "parentId": self.parent_id,
            "playerIds": list(self.player_ids),
            "dateOfBirth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "phoneNumber": self.phone_number,
        }

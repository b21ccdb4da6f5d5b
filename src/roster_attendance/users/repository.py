from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..platform.repository import CollectionRepository
from .model import Actor


class UserRepository(CollectionRepository, Protocol):
    """Repository interface for Actor.

    Note (DIP): services and hooks depend on this interface, not on a concrete DB.
    """

    def get_by_email(self, email: str) -> Optional[Actor]:
        raise NotImplementedError

    def list_active_players(self, *, limit: int) -> Sequence[Actor]:
        raise NotImplementedError

    def set_password(self, user_id: int, *, password_hash: str) -> bool:
        raise NotImplementedError

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence


class CollectionRepository(Protocol):
    """Storage contract the data platform drives for every collection.

    ``where`` is an AND of field equalities using entity attribute names.
    ``sort`` is a field name, prefixed with '-' for descending order.
    """

    def find(
        self,
        *,
        where: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
    ) -> Sequence[Any]:
        raise NotImplementedError

    def count(self, *, where: Optional[Mapping[str, Any]] = None) -> int:
        raise NotImplementedError

    def get_by_id(self, doc_id: int) -> Optional[Any]:
        raise NotImplementedError

    def create(self, data: Mapping[str, Any]) -> Any:
        raise NotImplementedError

    def update(self, doc_id: int, data: Mapping[str, Any]) -> Any:
        raise NotImplementedError

    def delete(self, doc_id: int) -> bool:
        raise NotImplementedError

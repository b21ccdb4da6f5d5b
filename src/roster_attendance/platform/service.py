from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from ..access.policy import AccessDecision, decide
from ..core.constants import DEFAULT_FIND_LIMIT
from ..core.enums import Collection, Operation
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from ..users.model import Actor
from .hooks import HookContext, HookRegistry, HookStage
from .repository import CollectionRepository


@dataclass
class FindResult:
    docs: List[Any] = field(default_factory=list)
    total_docs: int = 0

    def to_api(self) -> dict:
        return {"docs": [d.to_api() for d in self.docs], "totalDocs": self.total_docs}


class DataPlatform:
    """CRUD gateway: access policy first, then lifecycle hooks, then storage.

    Services call this the way route handlers call a content platform's
    local API; ``actor=None`` is an anonymous request.
    """

    def __init__(
        self,
        repositories: Mapping[Collection, CollectionRepository],
        hooks: HookRegistry,
        *,
        default_limit: int = DEFAULT_FIND_LIMIT,
    ):
        self._repos = dict(repositories)
        self._hooks = hooks
        self._default_limit = int(default_limit)

    def _repo(self, collection: Collection) -> CollectionRepository:
        return self._repos[collection]

    def _authorize(self, collection: Collection, operation: Operation, actor: Optional[Actor]) -> AccessDecision:
        role = actor.role if actor else None
        actor_id = actor.user_id if actor else None
        decision = decide(role, actor_id, collection, operation)
        if not decision.allowed:
            if actor is None:
                raise AuthenticationError("Unauthorized")
            raise AuthorizationError(f"You are not allowed to {operation.value} {collection.value}")
        return decision

    def _load(self, collection: Collection, doc_id: int) -> Any:
        doc = self._repo(collection).get_by_id(int(doc_id))
        if doc is None:
            raise NotFoundError(f"{collection.value} {doc_id} not found")
        return doc

    def find(
        self,
        collection: Collection,
        *,
        actor: Optional[Actor],
        where: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
    ) -> FindResult:
        decision = self._authorize(collection, Operation.READ, actor)
        scoped_where = decision.apply_to(where)
        if scoped_where is None:
            return FindResult()

        repo = self._repo(collection)
        limit = limit or self._default_limit
        if decision.post_read_filter:
            # The filter decides visibility, so it sees every row before paging.
            docs = list(repo.find(where=scoped_where, limit=None, sort=sort))
            ctx = HookContext(collection=collection, operation=Operation.READ, actor=actor, docs=docs)
            visible = self._hooks.run(collection, HookStage.AFTER_READ, ctx).docs
            return FindResult(docs=visible[:limit], total_docs=len(visible))

        docs = list(repo.find(where=scoped_where, limit=limit, sort=sort))
        total = repo.count(where=scoped_where)

        ctx = HookContext(collection=collection, operation=Operation.READ, actor=actor, docs=docs)
        self._hooks.run(collection, HookStage.AFTER_READ, ctx)
        return FindResult(docs=ctx.docs, total_docs=total)

    def find_by_id(self, collection: Collection, doc_id: int, *, actor: Optional[Actor]) -> Any:
        decision = self._authorize(collection, Operation.READ, actor)
        doc = self._load(collection, doc_id)
        if not decision.matches(doc):
            raise NotFoundError(f"{collection.value} {doc_id} not found")

        ctx = HookContext(collection=collection, operation=Operation.READ, actor=actor, docs=[doc], single=True)
        self._hooks.run(collection, HookStage.AFTER_READ, ctx)
        if not ctx.docs:
            raise NotFoundError(f"{collection.value} {doc_id} not found")
        return ctx.docs[0]

    def count(self, collection: Collection, *, actor: Optional[Actor], where: Optional[Mapping[str, Any]] = None) -> int:
        decision = self._authorize(collection, Operation.READ, actor)
        scoped_where = decision.apply_to(where)
        if scoped_where is None:
            return 0
        if decision.post_read_filter:
            docs = list(self._repo(collection).find(where=scoped_where, limit=None, sort=None))
            ctx = HookContext(collection=collection, operation=Operation.READ, actor=actor, docs=docs)
            return len(self._hooks.run(collection, HookStage.AFTER_READ, ctx).docs)
        return int(self._repo(collection).count(where=scoped_where))

    def create(self, collection: Collection, data: Mapping[str, Any], *, actor: Optional[Actor]) -> Any:
        self._authorize(collection, Operation.CREATE, actor)

        ctx = HookContext(collection=collection, operation=Operation.CREATE, actor=actor, data=dict(data))
        self._hooks.run(collection, HookStage.BEFORE_VALIDATE, ctx)
        self._hooks.run(collection, HookStage.BEFORE_CHANGE, ctx)

        ctx.doc = self._repo(collection).create(ctx.data)
        self._hooks.run(collection, HookStage.AFTER_CHANGE, ctx)
        return ctx.doc

    def update(self, collection: Collection, doc_id: int, data: Mapping[str, Any], *, actor: Optional[Actor]) -> Any:
        decision = self._authorize(collection, Operation.UPDATE, actor)
        stored = self._load(collection, doc_id)
        if not decision.matches(stored):
            raise AuthorizationError(f"You are not allowed to update this {collection.value} record")

        ctx = HookContext(
            collection=collection,
            operation=Operation.UPDATE,
            actor=actor,
            data=dict(data),
            original=stored,
        )
        self._hooks.run(collection, HookStage.BEFORE_VALIDATE, ctx)
        self._hooks.run(collection, HookStage.BEFORE_CHANGE, ctx)

        ctx.doc = self._repo(collection).update(int(doc_id), ctx.data)
        self._hooks.run(collection, HookStage.AFTER_CHANGE, ctx)
        return ctx.doc

    def delete(self, collection: Collection, doc_id: int, *, actor: Optional[Actor]) -> Any:
        self._authorize(collection, Operation.DELETE, actor)
        stored = self._load(collection, doc_id)

        ctx = HookContext(collection=collection, operation=Operation.DELETE, actor=actor, original=stored)
        self._hooks.run(collection, HookStage.BEFORE_DELETE, ctx)

        if not self._repo(collection).delete(int(doc_id)):
            raise NotFoundError(f"{collection.value} {doc_id} not found")
        return stored


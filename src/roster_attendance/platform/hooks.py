"""Lifecycle hook points of the data platform.

Hooks are plain callables registered per (collection, stage). A hook may
return a replacement for ``ctx.data`` (validate/change stages) or for
``ctx.docs`` (after-read); returning None keeps the current value. Raising
aborts the operation being guarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.enums import Collection, Operation, Role
from ..users.model import Actor


class HookStage(str, Enum):
    BEFORE_VALIDATE = "before_validate"
    BEFORE_CHANGE = "before_change"
    AFTER_CHANGE = "after_change"
    AFTER_READ = "after_read"
    BEFORE_DELETE = "before_delete"


@dataclass
class HookContext:
    collection: Collection
    operation: Operation
    actor: Optional[Actor]
    data: Dict[str, Any] = field(default_factory=dict)
    original: Any = None
    doc: Any = None
    docs: List[Any] = field(default_factory=list)
    single: bool = False

    @property
    def role(self) -> Optional[Role]:
        return self.actor.role if self.actor else None

    @property
    def actor_id(self) -> Optional[int]:
        return self.actor.user_id if self.actor else None

    def merged(self, name: str, default: Any = None) -> Any:
        """Incoming value for ``name`` or, on update, the stored one."""
        if name in self.data:
            return self.data[name]
        if self.original is not None:
            return getattr(self.original, name, default)
        return default


Hook = Callable[[HookContext], Any]


class HookRegistry:
    def __init__(self) -> None:
        self._hooks: Dict[Tuple[Collection, HookStage], List[Hook]] = {}

    def register(self, collection: Collection, stage: HookStage, hook: Hook) -> None:
        self._hooks.setdefault((collection, stage), []).append(hook)

    def hooks_for(self, collection: Collection, stage: HookStage) -> List[Hook]:
        return list(self._hooks.get((collection, stage), []))

    def run(self, collection: Collection, stage: HookStage, ctx: HookContext) -> HookContext:
        for hook in self.hooks_for(collection, stage):
            result = hook(ctx)
            if result is None:
                continue
            if stage == HookStage.AFTER_READ:
                ctx.docs = list(result)
            else:
                ctx.data = dict(result)
        return ctx

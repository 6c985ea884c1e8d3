"""Backend protocol shared by the Local and Cloud stores.

A collection manager talks to exactly one `CollectionBackend` per call. Both
backends speak whole entities (dicts keyed by ``id``) and report changes as
full snapshots, never diffs.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Protocol, TypeVar, Union

from dolmenwood.models import Entity

logger = logging.getLogger(__name__)

T = TypeVar("T")

Snapshot = list[Entity]
OnChange = Callable[[Snapshot], Union[None, Awaitable[None]]]


class StorageError(RuntimeError):
    """Raised when a write could not be persisted by any backend."""


class CollectionBackend(Protocol):
    """One logical collection inside one backend."""

    name: str

    async def read_all(self) -> Snapshot: ...

    async def upsert(self, entity: Entity) -> None: ...

    async def put_many(self, entities: Snapshot) -> None: ...

    async def merge(self, entity_id: str, fields: Entity) -> Entity | None: ...

    async def delete(self, entity_id: str) -> None: ...

    async def watch(self, on_change: OnChange) -> "Subscription": ...

    async def clear(self) -> None: ...


class Subscription:
    """Handle for a live listener. Close it exactly once to release it.

    Usable as an async context manager so the enclosing scope guarantees
    release::

        async with await manager.subscribe(render):
            ...
    """

    def __init__(self, release: Callable[[], Awaitable[None]] | None = None, *, label: str = "") -> None:
        self._release = release
        self._label = label
        self.closed = False

    @classmethod
    def noop(cls, label: str = "") -> "Subscription":
        return cls(None, label=label)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._release is not None:
            await self._release()
        logger.debug("subscription closed label=%s", self._label)

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


async def deliver(callback: Callable[[T], Any], value: T) -> None:
    """Invoke a listener, awaiting the result when it returns an awaitable."""
    result = callback(value)
    if inspect.isawaitable(result):
        await result


async def with_timeout(awaitable: Awaitable[T], seconds: float) -> T:
    """Race an awaitable against a timer. Raises TimeoutError when the timer wins."""
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as e:
        raise TimeoutError(f"Connection timeout after {seconds}s") from e

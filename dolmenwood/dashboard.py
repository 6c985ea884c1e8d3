"""Wires the four collection managers to one storage context.

Initialization order matters: the gate flags are written in `init()` and read
by every later call, so `init()` must finish before any manager is used.
Auth state changes re-run `init()`, which re-resolves the identity and
rebuilds the managers against the new scope.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from dolmenwood.config import Settings
from dolmenwood.examples import example_characters
from dolmenwood.models import Entity
from dolmenwood.storage import (
    CharacterManager,
    CloudStore,
    CollectionManager,
    HealthReport,
    IdentityProvider,
    LocalStore,
    MapManager,
    PartyManager,
    PartyMemberManager,
    StaticIdentity,
    StorageContext,
    Subscription,
    check_connectivity,
)

logger = logging.getLogger(__name__)


class Dashboard:
    def __init__(
        self,
        local: LocalStore,
        cloud: CloudStore | None = None,
        identity: IdentityProvider | None = None,
        timeout: float = 5.0,
    ) -> None:
        self._local = local
        self._cloud = cloud
        self._identity: IdentityProvider = identity or StaticIdentity()
        self._timeout = timeout
        self._reinit_listeners: list[Callable[[], Awaitable[None]]] = []
        self._build()

    @classmethod
    def from_settings(cls, settings: Settings, identity: IdentityProvider | None = None) -> "Dashboard":
        cloud = CloudStore.from_url(settings.cloud_url, settings.cloud_prefix) if settings.cloud_url else None
        return cls(LocalStore(settings.data_dir), cloud, identity, timeout=settings.health_timeout)

    def _build(self) -> None:
        self.context = StorageContext.resolve(self._local, self._cloud, self._identity, self._timeout)
        self.party_members = PartyMemberManager(self.context)
        self.characters = CharacterManager(self.context, self.party_members)
        self.parties = PartyManager(self.context)
        self.maps = MapManager(self.context)

    @property
    def local(self) -> LocalStore:
        return self._local

    @property
    def cloud(self) -> CloudStore | None:
        return self._cloud

    @property
    def identity(self) -> str | None:
        return self.context.identity

    def managers(self) -> dict[str, CollectionManager]:
        return {
            "characters": self.characters,
            "parties": self.parties,
            "party_members": self.party_members,
            "maps": self.maps,
        }

    async def init(self) -> dict[str, bool]:
        """(Re)initialise every manager in turn. Returns cloud mode per collection."""
        self._build()
        status: dict[str, bool] = {}
        for name, manager in self.managers().items():
            status[name] = await manager.init()
        logger.info("Storage ready identity=%s status=%s", self.identity, status)
        for listener in list(self._reinit_listeners):
            try:
                await listener()
            except Exception:
                logger.exception("Re-init listener failed")
        return status

    async def on_reinit(self, callback: Callable[[], Awaitable[None]]) -> Subscription:
        """Call `callback` after every `init()`, once the new managers are ready.

        Anything holding a manager (a live stream, say) uses this to rebind to
        the rebuilt one.
        """
        self._reinit_listeners.append(callback)

        async def release() -> None:
            if callback in self._reinit_listeners:
                self._reinit_listeners.remove(callback)

        return Subscription(release, label="reinit")

    @property
    def sync_status(self) -> str:
        if not self.identity:
            return "Not logged in"
        return "Cloud sync enabled" if self.characters.cloud_active else "Offline mode"

    async def load_characters(self) -> list[Entity]:
        """Owned characters, seeding the samples into an empty roster first."""
        stored = await self.characters.list()
        if stored:
            return stored
        logger.info("Seeding example characters for %s", self.identity)
        await self.characters.save_all(example_characters(self.identity))
        return await self.characters.list()

    async def health(self) -> HealthReport:
        return await check_connectivity(self._cloud, self._timeout)

    async def close(self) -> None:
        if self._cloud is not None:
            await self._cloud.close()

"""Identity and storage context.

The storage layer consumes one capability from auth: "who is signed in, if
anyone". `StorageContext` bundles that identity with the two backend handles
so managers receive everything explicitly at construction time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Protocol, Union
from uuid import uuid4

from .base import Subscription, deliver
from .cloud import CloudStore
from .local import LocalStore

logger = logging.getLogger(__name__)

MOCK_USER_KEY = "mock_user"

User = dict[str, Any]
OnAuthChange = Callable[[Union[User, None]], Union[None, Awaitable[None]]]


class IdentityProvider(Protocol):
    def current_identity(self) -> str | None: ...


@dataclass(frozen=True)
class StaticIdentity:
    """Fixed identity, or None for an anonymous session."""

    uid: str | None = None

    def current_identity(self) -> str | None:
        return self.uid


@dataclass(frozen=True)
class StorageContext:
    local: LocalStore
    cloud: CloudStore | None
    identity: str | None
    timeout: float = 5.0

    @classmethod
    def resolve(
        cls,
        local: LocalStore,
        cloud: CloudStore | None,
        identity: IdentityProvider,
        timeout: float = 5.0,
    ) -> "StorageContext":
        return cls(local=local, cloud=cloud, identity=identity.current_identity(), timeout=timeout)

    def owned_path(self, collection: str) -> str | None:
        """Cloud path for a per-user collection, or None without an identity."""
        if not self.identity:
            return None
        return f"users/{self.identity}/{collection}"


class LocalAuthService:
    """Email sign-in kept in the Local Store, for deployments without an auth provider.

    Any email/password pair is accepted; the signed-in user lives under the
    ``mock_user`` key until `sign_out()`.
    """

    def __init__(self, store: LocalStore) -> None:
        self._store = store
        self._listeners: list[OnAuthChange] = []

    def current_user(self) -> User | None:
        return self._store.get(MOCK_USER_KEY)

    def current_identity(self) -> str | None:
        user = self.current_user()
        return user["uid"] if user else None

    async def sign_up(self, email: str, password: str) -> User:
        return await self._sign_in_as(email)

    async def sign_in(self, email: str, password: str) -> User:
        return await self._sign_in_as(email)

    async def sign_out(self) -> None:
        self._store.remove(MOCK_USER_KEY)
        await self._notify(None)

    async def on_auth_state_changed(self, callback: OnAuthChange) -> Subscription:
        """Register a listener and call it immediately with the current user."""
        self._listeners.append(callback)
        await deliver(callback, self.current_user())

        async def release() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return Subscription(release, label="auth")

    async def _sign_in_as(self, email: str) -> User:
        user = {
            "uid": f"local-{uuid4().hex}",
            "email": email,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        self._store.set(MOCK_USER_KEY, user)
        logger.info("Signed in %s", email)
        await self._notify(user)
        return user

    async def _notify(self, user: User | None) -> None:
        for listener in list(self._listeners):
            try:
                await deliver(listener, user)
            except Exception:
                logger.exception("Auth state listener failed")

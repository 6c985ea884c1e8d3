"""Dual-backend persistence for characters, parties, party-member summaries and maps.

Backends:
  Local Store   JSON arrays under fixed keys in the data directory
                (dolmenwood_characters, dolmenwood_parties,
                dolmenwood_party_members, dolmenwood_maps). Pull-only.
  Cloud Store   Redis hashes, one document per entity, with a pub/sub
                change channel per collection. Multi-writer, push-updated.

Cloud paths: characters are owned and live under users/{uid}/characters;
parties, party members and maps are shared flat collections
(shared_parties, shared_party_members, shared_maps).

Each manager checks cloud availability once in `init()`, copies legacy local
data up the first time the cloud is reachable, and from then on routes every
call through the gate with a per-call fallback to the Local Store.
"""

# Re-export the public surface so `from dolmenwood import storage` is enough.

from .base import (  # noqa: F401
    CollectionBackend,
    StorageError,
    Subscription,
    with_timeout,
)

from .local import LocalCollection, LocalStore  # noqa: F401

from .cloud import CloudCollection, CloudStore  # noqa: F401

from .gate import AvailabilityGate  # noqa: F401

from .health import (  # noqa: F401
    HealthReport,
    check_connectivity,
    start_periodic_health_check,
)

from .migration import migrate_local_to_cloud  # noqa: F401

from .session import (  # noqa: F401
    IdentityProvider,
    LocalAuthService,
    StaticIdentity,
    StorageContext,
)

from .manager import CollectionManager  # noqa: F401
from .party_members import PartyMemberManager  # noqa: F401
from .characters import CharacterManager  # noqa: F401
from .parties import PartyManager  # noqa: F401
from .maps import MapManager  # noqa: F401

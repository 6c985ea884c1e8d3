"""FastAPI API endpoints under /api.

Endpoint groups: health, copilot (chat proxy), auth (local sign-in),
characters, parties (+ members), maps, and the /ws/{collection} snapshot
stream.
"""

from fastapi import APIRouter

from .ask import router as ask_router
from .auth import router as auth_router
from .characters import router as characters_router
from .health import router as health_router
from .maps import router as maps_router
from .parties import router as parties_router
from .stream import router as stream_router

router = APIRouter()
router.include_router(health_router)
router.include_router(ask_router)
router.include_router(auth_router)
router.include_router(characters_router)
router.include_router(parties_router)
router.include_router(maps_router)
router.include_router(stream_router)

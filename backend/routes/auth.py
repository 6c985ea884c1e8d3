"""Local sign-in endpoints. Signing in or out re-initialises storage."""

from fastapi import APIRouter, Depends

from backend.deps import get_auth, get_dashboard
from dolmenwood.dashboard import Dashboard
from dolmenwood.storage import LocalAuthService

from .models import Credentials

router = APIRouter()


@router.post("/auth/sign-up", status_code=201)
async def sign_up(body: Credentials, auth: LocalAuthService = Depends(get_auth)):
    return await auth.sign_up(body.email, body.password)


@router.post("/auth/sign-in")
async def sign_in(body: Credentials, auth: LocalAuthService = Depends(get_auth)):
    return await auth.sign_in(body.email, body.password)


@router.post("/auth/sign-out")
async def sign_out(auth: LocalAuthService = Depends(get_auth)):
    await auth.sign_out()
    return {"ok": True}


@router.get("/auth/me")
async def me(
    auth: LocalAuthService = Depends(get_auth),
    dashboard: Dashboard = Depends(get_dashboard),
):
    """Current user and which backend is serving their characters."""
    return {"user": auth.current_user(), "syncStatus": dashboard.sync_status}

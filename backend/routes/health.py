"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from backend.deps import get_dashboard
from dolmenwood.dashboard import Dashboard

router = APIRouter()


@router.get("/health")
async def health(dashboard: Dashboard = Depends(get_dashboard)):
    """Server liveness plus a bounded probe of the cloud store."""
    report = await dashboard.health()
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "storage": report.model_dump(),
    }

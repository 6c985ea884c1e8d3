"""Shared map endpoints."""

from fastapi import APIRouter, Depends

from backend.deps import get_dashboard
from dolmenwood.dashboard import Dashboard
from dolmenwood.models import MapInput

router = APIRouter()


@router.get("/maps")
async def list_maps(dashboard: Dashboard = Depends(get_dashboard)):
    return await dashboard.maps.list()


@router.post("/maps", status_code=201)
async def upload_map(body: MapInput, dashboard: Dashboard = Depends(get_dashboard)):
    return await dashboard.maps.add(body.model_dump(by_alias=True))


@router.delete("/maps/{map_id}")
async def delete_map(map_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.maps.remove(map_id)
    return {"ok": True}

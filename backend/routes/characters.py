"""Character CRUD endpoints. Sheets are free-form JSON objects."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from backend.deps import get_dashboard
from dolmenwood.dashboard import Dashboard

router = APIRouter()


@router.get("/characters")
async def list_characters(dashboard: Dashboard = Depends(get_dashboard)):
    """List owned characters (seeds the samples into an empty roster)."""
    return await dashboard.load_characters()


@router.post("/characters", status_code=201)
async def create_character(body: dict[str, Any], dashboard: Dashboard = Depends(get_dashboard)):
    return await dashboard.characters.add(body)


@router.get("/characters/{character_id}")
async def get_character(character_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    character = await dashboard.characters.get(character_id)
    if not character:
        raise HTTPException(404, "Character not found")
    return character


@router.patch("/characters/{character_id}")
async def update_character(
    character_id: str,
    body: dict[str, Any],
    dashboard: Dashboard = Depends(get_dashboard),
):
    """Merge fields into a character; party membership follows `partyName`."""
    character = await dashboard.characters.update(character_id, body)
    if character is None:
        raise HTTPException(404, "Character not found")
    return character


@router.delete("/characters/{character_id}")
async def delete_character(character_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.characters.remove(character_id)
    return {"ok": True}

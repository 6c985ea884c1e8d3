"""Party CRUD and roster endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from backend.deps import get_dashboard
from dolmenwood.dashboard import Dashboard
from dolmenwood.models import PartyInput, PartyUpdate

router = APIRouter()


@router.get("/parties")
async def list_parties(dashboard: Dashboard = Depends(get_dashboard)):
    """All parties, newest first."""
    return await dashboard.parties.list()


@router.post("/parties", status_code=201)
async def create_party(body: PartyInput, dashboard: Dashboard = Depends(get_dashboard)):
    return await dashboard.parties.add(body.model_dump(by_alias=True))


@router.patch("/parties/{party_id}")
async def update_party(party_id: str, body: PartyUpdate, dashboard: Dashboard = Depends(get_dashboard)):
    """Rename a party or change its description."""
    party = await dashboard.parties.update(party_id, body.model_dump(by_alias=True, exclude_unset=True))
    if party is None:
        raise HTTPException(404, "Party not found")
    return party


@router.delete("/parties/{party_id}")
async def delete_party(party_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    """Delete a party. Characters keep their `partyName`."""
    await dashboard.parties.remove(party_id)
    return {"ok": True}


@router.get("/parties/{party_name}/members")
async def list_party_members(party_name: str, dashboard: Dashboard = Depends(get_dashboard)):
    """Summaries of every character whose `partyName` matches."""
    return await dashboard.party_members.members_of(party_name)

"""Live collection snapshots over WebSocket.

Each connection holds one subscription, released when the socket closes.
`/ws/party_members?party=<name>` narrows the stream to one roster.
When sign-in or sign-out rebuilds the managers, the stream drops its old
subscription and resubscribes against the new scope, which pushes a fresh
snapshot.
"""

import logging

from fastapi import APIRouter, WebSocket
from fastapi.websockets import WebSocketDisconnect

from dolmenwood.dashboard import Dashboard
from dolmenwood.storage import Subscription

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/{collection}")
async def stream_collection(websocket: WebSocket, collection: str, party: str | None = None):
    dashboard: Dashboard = websocket.app.state.dashboard
    if collection not in dashboard.managers():
        await websocket.close(code=1008, reason="Unknown collection")
        return

    async def open_subscription() -> Subscription:
        if collection == "party_members" and party is not None:
            return await dashboard.party_members.subscribe_to_party(party, websocket.send_json)
        return await dashboard.managers()[collection].subscribe(websocket.send_json)

    await websocket.accept()
    subscription = await open_subscription()

    async def rebind() -> None:
        nonlocal subscription
        await subscription.close()
        subscription = await open_subscription()
        logger.debug("Rebound %s stream to identity=%s", collection, dashboard.identity)

    try:
        async with await dashboard.on_reinit(rebind):
            while True:
                await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Client left %s stream", collection)
    finally:
        await subscription.close()

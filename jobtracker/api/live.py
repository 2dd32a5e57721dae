"""
Live updates over WebSocket.

Each connection is registered with the broadcast hub for as long as it stays
open. Frames sent by the client are read and ignored.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from jobtracker.services.broadcast_hub import BroadcastHub
from jobtracker.services.container import get_broadcast_hub
from jobtracker.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Live"])


class WebSocketObserver:
    """Adapts a FastAPI WebSocket to the hub's observer interface."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    async def send(self, message: Dict[str, Any]) -> None:
        await self.websocket.send_json(message)

    async def close(self) -> None:
        if self.websocket.application_state == WebSocketState.CONNECTED:
            await self.websocket.close()


@router.websocket("/")
@router.websocket("/ws")
async def live_updates(websocket: WebSocket, hub: BroadcastHub = Depends(get_broadcast_hub)):
    await websocket.accept()
    observer = WebSocketObserver(websocket)
    await hub.register(observer)
    logger.info("[Live] Client connected to WebSocket")
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("[Live] Client disconnected from WebSocket")
    finally:
        await hub.unregister(observer)

import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger

router = APIRouter()


@router.websocket("/ws/sync")
async def sync_websocket(websocket: WebSocket):
    """WebSocket endpoint for real-time playback synchronization."""
    sync_manager = websocket.app.state.sync_manager
    await sync_manager.connect(websocket)

    try:
        # Send current state immediately so clients never wait for a transition
        await websocket.send_json({
            "type": "sync:full",
            "data": sync_manager.get_current_state(),
        })

        # Handle incoming messages
        while True:
            message = await websocket.receive_text()
            try:
                data = json.loads(message)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON from WebSocket: {message}")
                continue

            if isinstance(data, dict) and data.get("type") == "sync:request":
                await websocket.send_json({
                    "type": "sync:full",
                    "data": sync_manager.get_current_state(),
                })

    except WebSocketDisconnect:
        sync_manager.disconnect(websocket)

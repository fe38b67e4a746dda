import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from flickr_search.app.handler import Handler
from flickr_search.protocol import (
    WS_CHANNEL_ADDRESS,
    FetchDetailMessage,
    SearchMessage,
    SearchWebSocket,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["ws"])


@router.websocket(WS_CHANNEL_ADDRESS)
async def ws(websocket: WebSocket):
    # Wrap the standard WebSocket with our typed version
    typed_ws = SearchWebSocket(websocket.scope, websocket.receive, websocket.send)
    await typed_ws.accept()

    logger.info("[ws] Session opened")

    handler = Handler(sender=typed_ws)
    handler.start()

    try:
        while True:
            try:
                message = await typed_ws.receive_json()
            except (ValidationError, json.JSONDecodeError) as e:
                logger.error(f"Invalid message format: {e}")
                handler.send_error("Invalid message format")
                continue

            logger.info(f"[ws] {message.type}")

            if isinstance(message, SearchMessage):
                handler.search(message.data)
                continue

            if isinstance(message, FetchDetailMessage):
                handler.fetch_detail(message.data)
                continue

    except WebSocketDisconnect:
        logger.info("[ws] Session closed")
    finally:
        handler.cancel_tasks()

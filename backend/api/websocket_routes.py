"""
WebSocket routes for real-time board communication.
"""
import json
import uuid

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from .coordinator import coordinator
from .websocket_manager import connection_manager
from .logging_config import get_logger
from .monitoring import session_events, websocket_connections

logger = get_logger("websocket")

router = APIRouter()


def parse_envelope(raw: str):
    """
    Split a client frame into (event, data).

    Raises ValueError for anything that is not a JSON object with a string
    "type" field.
    """
    message = json.loads(raw)
    if not isinstance(message, dict):
        raise ValueError("Message must be a JSON object")
    event = message.get("type")
    if not isinstance(event, str):
        raise ValueError("Message is missing a 'type'")
    return event, message.get("data")


@router.websocket("/ws")
async def websocket_board_endpoint(websocket: WebSocket):
    """WebSocket endpoint for the shared board."""
    connection_id = str(uuid.uuid4())
    registered = False

    try:
        # Register and snapshot under the lock so no broadcast slips in between.
        async with coordinator.lock:
            await connection_manager.connect(websocket, connection_id)
            registered = True
            websocket_connections.inc()
            logger.info("websocket_connected", connection_id=connection_id)
            await connection_manager.deliver(coordinator.connect(connection_id), connection_id)

        # Listen for messages
        while True:
            raw = await websocket.receive_text()
            try:
                event, data = parse_envelope(raw)
            except ValueError as e:
                session_events.labels(event="unknown", outcome="malformed").inc()
                logger.warning("malformed_message", connection_id=connection_id, error=str(e))
                continue

            async with coordinator.lock:
                try:
                    outbound = coordinator.handle(connection_id, event, data)
                except Exception as e:
                    logger.exception("event_handler_error", connection_id=connection_id, event_type=event, error=str(e))
                    continue
                await connection_manager.deliver(outbound, connection_id)

    except WebSocketDisconnect:
        logger.info("websocket_disconnected", connection_id=connection_id)
    except Exception as e:
        logger.error("websocket_error_outer", connection_id=connection_id, error=str(e))
    finally:
        if registered:
            async with coordinator.lock:
                await connection_manager.disconnect(connection_id)
                await connection_manager.deliver(coordinator.disconnect(connection_id), connection_id)
            websocket_connections.dec()
            logger.info("websocket_cleanup", connection_id=connection_id)

"""
WebSocket connection manager for real-time board updates.
"""
from typing import Dict, Iterable, Optional
from fastapi import WebSocket
import asyncio

from .coordinator import Outbound, Target
from .logging_config import get_logger

logger = get_logger("websocket_manager")


class ConnectionManager:
    """Manages WebSocket connections to the shared board."""

    def __init__(self):
        # connection_id -> WebSocket
        self.active_connections: Dict[str, WebSocket] = {}
        # Lock for thread-safe operations
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, connection_id: str):
        """Accept a WebSocket and register it under connection_id."""
        await websocket.accept()

        async with self._lock:
            self.active_connections[connection_id] = websocket

    async def disconnect(self, connection_id: str):
        """Forget a connection."""
        async with self._lock:
            self.active_connections.pop(connection_id, None)

    async def send_personal_message(self, message: dict, connection_id: str):
        """Send a message to a specific connection."""
        websocket = self.active_connections.get(connection_id)
        if websocket is None:
            return
        try:
            await websocket.send_json(message)
        except Exception as e:
            logger.warning("personal_message_failed", connection_id=connection_id, error=str(e))
            await self.disconnect(connection_id)

    async def broadcast(self, message: dict, exclude: Optional[str] = None):
        """Broadcast a message to all connections."""
        async with self._lock:
            connections = dict(self.active_connections)

        disconnected = []
        for connection_id, connection in connections.items():
            if connection_id == exclude:
                continue
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.warning("broadcast_failed", connection_id=connection_id, error=str(e))
                disconnected.append(connection_id)

        # Clean up disconnected connections
        for connection_id in disconnected:
            await self.disconnect(connection_id)

    async def deliver(self, outbound: Iterable[Outbound], sender_id: str):
        """Send each message to the audience it asks for, in order."""
        for item in outbound:
            message = item.to_message()
            if item.target == Target.SENDER:
                await self.send_personal_message(message, sender_id)
            elif item.target == Target.OTHERS:
                await self.broadcast(message, exclude=sender_id)
            else:
                await self.broadcast(message)

    def get_connection_count(self) -> int:
        """Get the number of active connections."""
        return len(self.active_connections)


# Global connection manager instance
connection_manager = ConnectionManager()

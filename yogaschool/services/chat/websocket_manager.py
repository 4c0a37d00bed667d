# yogaschool/services/chat/websocket_manager.py
from typing import Dict, Iterable, List, Optional, Set
from uuid import uuid4
from fastapi import WebSocket
import json
import logging

logger = logging.getLogger(__name__)

class WebSocketManager:
    """Transient socket subscriptions; nothing here survives a disconnect.

    A connection may register one user (its private channel) and join any
    number of room channels. One user may hold several connections.
    """

    def __init__(self):
        # Store active connections: {connection_id: websocket}
        self.active_connections: Dict[str, WebSocket] = {}
        # {connection_id: user_id} for registered connections
        self.connection_users: Dict[str, str] = {}
        # Store chat room subscriptions: {room_id: {connection_ids}}
        self.room_subscriptions: Dict[str, Set[str]] = {}
        # Private per-user channels: {user_id: {connection_ids}}
        self.user_channels: Dict[str, Set[str]] = {}

    async def connect(self, websocket: WebSocket) -> str:
        """Accept websocket connection and return its connection id"""
        await websocket.accept()
        connection_id = uuid4().hex
        self.active_connections[connection_id] = websocket
        logger.info(f"Connection {connection_id} opened")
        return connection_id

    def disconnect(self, connection_id: str):
        """Remove connection and clean up subscriptions"""
        if connection_id not in self.active_connections:
            return

        del self.active_connections[connection_id]
        user_id = self.connection_users.pop(connection_id, None)

        self.room_subscriptions = _without(self.room_subscriptions, connection_id)
        self.user_channels = _without(self.user_channels, connection_id)
        logger.info(f"Connection {connection_id} closed (user {user_id})")

    def register_user(self, connection_id: str, user_id: str):
        """Subscribe connection to the user's private channel"""
        previous = self.connection_users.get(connection_id)
        if previous and previous != user_id:
            self.user_channels.get(previous, set()).discard(connection_id)

        self.connection_users[connection_id] = user_id
        self.user_channels.setdefault(user_id, set()).add(connection_id)
        logger.info(f"Connection {connection_id} registered as user {user_id}")

    def join_room(self, connection_id: str, room_id: str):
        """Subscribe connection to a chat room"""
        self.room_subscriptions.setdefault(room_id, set()).add(connection_id)
        logger.info(f"Connection {connection_id} joined room {room_id}")

    def leave_room(self, connection_id: str, room_id: str):
        subscribers = self.room_subscriptions.get(room_id)
        if subscribers is None:
            return
        subscribers.discard(connection_id)
        if not subscribers:
            del self.room_subscriptions[room_id]

    def get_connection_user(self, connection_id: str) -> Optional[str]:
        return self.connection_users.get(connection_id)

    async def send_to_connection(self, connection_id: str, event: str, data: dict) -> bool:
        """Send one event to one connection"""
        websocket = self.active_connections.get(connection_id)
        if websocket is None:
            return False

        try:
            await websocket.send_text(json.dumps({"type": event, **data}, default=str))
            return True
        except Exception as e:
            logger.error(f"Error sending {event} to {connection_id}: {e}")
            self.disconnect(connection_id)
            return False

    async def _send_to_many(self, connection_ids: Iterable[str], event: str, data: dict) -> int:
        sent_count = 0
        # Copy first: failed sends disconnect and mutate the subscription sets
        for connection_id in list(connection_ids):
            if await self.send_to_connection(connection_id, event, data):
                sent_count += 1
        return sent_count

    async def broadcast_to_room(self, room_id: str, event: str, data: dict, exclude_connection: Optional[str] = None) -> int:
        """Send event to all connections subscribed to a chat room"""
        subscribers = self.room_subscriptions.get(room_id, set())
        targets = [cid for cid in subscribers if cid != exclude_connection]
        sent_count = await self._send_to_many(targets, event, data)
        logger.info(f"Broadcast {event} to room {room_id}: sent to {sent_count} connections")
        return sent_count

    async def send_to_user(self, user_id: str, event: str, data: dict) -> int:
        """Send event to every connection registered as user_id"""
        return await self._send_to_many(self.user_channels.get(user_id, set()), event, data)

    async def notify_users(self, user_ids: Iterable[str], event: str, data: dict) -> int:
        sent_count = 0
        for user_id in user_ids:
            sent_count += await self.send_to_user(user_id, event, data)
        return sent_count

    def get_connections_in_room(self, room_id: str) -> List[str]:
        return sorted(self.room_subscriptions.get(room_id, set()))

    def is_user_online(self, user_id: str) -> bool:
        """Check if user has a registered connection"""
        return bool(self.user_channels.get(user_id))


def _without(channels: Dict[str, Set[str]], connection_id: str) -> Dict[str, Set[str]]:
    """Drop a connection from every channel and forget channels left empty"""
    for subscribers in channels.values():
        subscribers.discard(connection_id)
    return {key: subscribers for key, subscribers in channels.items() if subscribers}

# Global WebSocket manager instance
websocket_manager = WebSocketManager()

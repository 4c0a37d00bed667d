# yogaschool/services/chat/__init__.py
from .room_service import RoomService
from .message_service import MessageService
from .unread_service import UnreadService
from .websocket_manager import WebSocketManager, websocket_manager

__all__ = ["RoomService", "MessageService", "UnreadService", "WebSocketManager", "websocket_manager"]

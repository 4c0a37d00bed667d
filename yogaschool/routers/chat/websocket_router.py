# yogaschool/routers/chat/websocket_router.py
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import ValidationError
import json
import logging
from ...core.database import get_db
from ...core.exceptions import ForbiddenError, YogaSchoolException, ValidationException
from ...schemas.chat_schemas import SendMessagePayload
from ...services.chat import MessageService, RoomService
from ...services.chat import events
from ...services.chat.websocket_manager import websocket_manager

logger = logging.getLogger(__name__)
router = APIRouter()


class ChatSocketHandler:
    """Dispatches client frames for one connection.

    Only send_message persists here. Group, leave and forward frames announce
    changes already made over REST; delete_message re-applies an idempotent
    soft delete before announcing it.
    """

    def __init__(self, connection_id: str, db: AsyncSession):
        self.connection_id = connection_id
        self.db = db
        self.messages = MessageService(db)
        self.rooms = RoomService(db)
        self.handlers = {
            "register_user": self.register_user,
            "join_room": self.join_room,
            "send_message": self.send_message,
            "delete_group": self.delete_group,
            "leave_group": self.leave_group,
            "delete_message": self.delete_message,
            "forward_message": self.forward_message,
        }

    async def dispatch(self, raw: str):
        try:
            frame = json.loads(raw)
        except json.JSONDecodeError:
            await events.send_error(self.connection_id, "Invalid message format", "ValidationException")
            return
        if not isinstance(frame, dict):
            await events.send_error(self.connection_id, "Invalid message format", "ValidationException")
            return

        event = frame.get("type")
        handler = self.handlers.get(event)
        if handler is None:
            await events.send_error(self.connection_id, f"Unknown message type: {event}", "ValidationException")
            return

        try:
            await handler(frame)
        except YogaSchoolException as e:
            logger.warning(f"{event} rejected for {self.connection_id}: {e.message}")
            await events.send_error(self.connection_id, e.message, e.__class__.__name__)
        except ValidationError as e:
            await events.send_error(self.connection_id, f"Invalid {event} payload", "ValidationException")
            logger.warning(f"Invalid {event} payload from {self.connection_id}: {e}")
        finally:
            # Never hold a read transaction open between frames
            await self.db.rollback()

    async def register_user(self, frame: dict):
        user_id = _required(frame, "userId")
        websocket_manager.register_user(self.connection_id, user_id)
        await websocket_manager.send_to_connection(self.connection_id, events.USER_REGISTERED, {"userId": user_id})

    async def join_room(self, frame: dict):
        # No membership check: access was checked when the history was fetched
        room_id = _required(frame, "roomId")
        websocket_manager.join_room(self.connection_id, room_id)
        await websocket_manager.send_to_connection(self.connection_id, events.ROOM_JOINED, {"roomId": room_id})

    async def send_message(self, frame: dict):
        payload = SendMessagePayload.model_validate(frame)
        connection_user = websocket_manager.get_connection_user(self.connection_id)

        message = await self.messages.send_message(payload, connection_user_id=connection_user)
        await events.publish_new_message(message, await self.rooms.member_ids(message.room_id))

    async def delete_group(self, frame: dict):
        group_id = _required(frame, "groupId")
        user_id = frame.get("userId")

        group = await self.rooms.get(group_id)
        # Already removed over REST: nothing left to check the creator against
        if group is not None and group.created_by != user_id:
            raise ForbiddenError("Only the group creator can delete this group")
        await events.publish_group_deleted(group_id, user_id)

    async def leave_group(self, frame: dict):
        group_id = _required(frame, "groupId")
        await events.publish_user_left(group_id, frame.get("userId"), frame.get("userName"))
        websocket_manager.leave_room(self.connection_id, group_id)

    async def delete_message(self, frame: dict):
        message = await self.messages.soft_delete_message(_required(frame, "messageId"), frame.get("userId"))
        await events.publish_message_deleted(message)

    async def forward_message(self, frame: dict):
        copies = await self.messages.get_forwarded_copies(frame.get("messageIds") or [], frame.get("userId"))
        for message in copies:
            await events.publish_new_message(message, await self.rooms.member_ids(message.room_id))


def _required(frame: dict, field: str) -> str:
    value = frame.get(field)
    if not value:
        raise ValidationException(f"{field} is required")
    return str(value)


@router.websocket("/ws/chat")
async def websocket_endpoint(
    websocket: WebSocket,
    db: AsyncSession = Depends(get_db)
):
    """WebSocket endpoint for real-time chat"""
    connection_id = await websocket_manager.connect(websocket)
    handler = ChatSocketHandler(connection_id, db)

    try:
        while True:
            data = await websocket.receive_text()
            await handler.dispatch(data)

    except WebSocketDisconnect:
        logger.info(f"Connection {connection_id} disconnected from chat")
    finally:
        websocket_manager.disconnect(connection_id)

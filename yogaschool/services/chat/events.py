# yogaschool/services/chat/events.py
"""Server-to-client chat events. Call these only after the change is committed."""
from typing import Iterable, Optional

from .websocket_manager import websocket_manager
from ...models.chat.chat_message import ChatMessage
from ...schemas.chat_schemas import MessageResponse

RECEIVE_MESSAGE = "receive_message"
NEW_MESSAGE_NOTIFICATION = "new_message_notification"
MESSAGE_DELETED = "message_deleted"
GROUP_DELETED = "group_deleted"
USER_LEFT_GROUP = "user_left_group"
MESSAGE_ERROR = "message_error"
USER_REGISTERED = "user_registered"
ROOM_JOINED = "room_joined"


def message_payload(message: ChatMessage) -> dict:
    return MessageResponse.model_validate(message).model_dump(mode="json", by_alias=True)


async def publish_new_message(message: ChatMessage, member_ids: Iterable[str]):
    """Room broadcast, plus a nudge on every other member's private channel"""
    await websocket_manager.broadcast_to_room(message.room_id, RECEIVE_MESSAGE, message_payload(message))
    await websocket_manager.notify_users(
        [member_id for member_id in member_ids if member_id != message.sender_id],
        NEW_MESSAGE_NOTIFICATION,
        {
            "roomId": message.room_id,
            "messageId": message.id,
            "senderId": message.sender_id,
            "senderName": message.sender_name,
        },
    )


async def publish_message_deleted(message: ChatMessage):
    await websocket_manager.broadcast_to_room(message.room_id, MESSAGE_DELETED, {
        "messageId": message.id,
        "roomId": message.room_id,
        "content": message.content,
    })


async def publish_group_deleted(group_id: str, deleted_by: str):
    await websocket_manager.broadcast_to_room(group_id, GROUP_DELETED, {
        "groupId": group_id,
        "userId": deleted_by,
    })


async def publish_user_left(group_id: str, user_id: Optional[str], user_name: Optional[str] = None):
    await websocket_manager.broadcast_to_room(group_id, USER_LEFT_GROUP, {
        "groupId": group_id,
        "userId": user_id,
        "userName": user_name,
    })


async def send_error(connection_id: str, message: str, error_type: str = "Error"):
    await websocket_manager.send_to_connection(connection_id, MESSAGE_ERROR, {
        "message": message,
        "errorType": error_type,
    })

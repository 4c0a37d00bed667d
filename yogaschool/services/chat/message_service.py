# yogaschool/services/chat/message_service.py
from typing import List, Optional
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ..base_service import BaseService
from ..user_service import UserService
from .room_service import RoomService
from ...core.config import settings
from ...core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError, ValidationException
from ...core.permissions import require_chat_access
from ...models.chat.chat_message import ChatMessage, MessageType
from ...schemas.chat_schemas import SendMessagePayload

logger = logging.getLogger(__name__)


class MessageService(BaseService[ChatMessage]):
    def __init__(self, db: AsyncSession):
        super().__init__(ChatMessage, db)
        self.users = UserService(db)
        self.rooms = RoomService(db)

    async def get_message_or_404(self, message_id: str) -> ChatMessage:
        message = await self.get(message_id)
        if not message:
            raise NotFoundError("Message", message_id)
        return message

    async def send_message(self, payload: SendMessagePayload, connection_user_id: Optional[str] = None) -> ChatMessage:
        """Persist a message coming in over the realtime channel.

        The sender must be a current, non-admin member of the room. A
        connection that registered a user may only send as that user.
        """
        sender_id = payload.sender_id or connection_user_id
        if not sender_id:
            raise UnauthorizedError("Sender is not identified")
        if connection_user_id and sender_id != connection_user_id:
            raise UnauthorizedError("Cannot send messages on behalf of another user")
        if not payload.room_id:
            raise ValidationException("Room ID is required")
        if not (payload.content and payload.content.strip()) and not payload.file_url:
            raise ValidationException("Message content or file is required")

        sender = await self.users.get_or_404(sender_id)
        require_chat_access(sender, "Admins cannot send messages")

        room = await self.rooms.get_room_or_404(payload.room_id)
        if not room.has_member(sender_id):
            raise ForbiddenError("You are not a member of this chat")

        message = ChatMessage(
            room_id=room.id,
            sender_id=sender.id,
            sender_name=sender.name,
            content=payload.content or "",
            message_type=_message_type(payload),
            file_url=payload.file_url,
            file_name=payload.file_name,
        )
        message.mark_read(sender.id)
        self.db.add(message)
        await self.db.commit()
        logger.info(f"Message {message.id} stored in room {room.id}")
        return message

    async def fetch_messages(self, room_id: str, user_id: str) -> List[ChatMessage]:
        """Full history of a room, oldest first."""
        user = await self.users.get(user_id)
        require_chat_access(user)

        room = await self.rooms.get_room_or_404(room_id)
        if not room.has_member(user_id):
            raise ForbiddenError("You do not have access to this chat")

        stmt = (
            select(ChatMessage)
            .where(ChatMessage.room_id == room_id)
            .order_by(ChatMessage.created_at, ChatMessage.sequence)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def soft_delete_message(self, message_id: str, user_id: Optional[str]) -> ChatMessage:
        """Scrub a message but keep its row, sender and place in history."""
        message = await self.get_message_or_404(message_id)
        if message.sender_id != user_id:
            raise ForbiddenError("You can only delete your own messages")
        if message.is_deleted:
            return message

        message.is_deleted = True
        message.content = settings.deleted_message_placeholder
        message.file_url = None
        message.file_name = None
        await self.db.commit()
        logger.info(f"Message {message_id} deleted by {user_id}")
        return message

    async def forward_message(self, message_id: Optional[str], target_room_ids: List[str], user_id: Optional[str]) -> List[ChatMessage]:
        """Copy a message into each target room as a new, forwarded message."""
        if not user_id:
            raise ValidationException("User ID is required")
        forwarder = await self.users.get_or_404(user_id)
        require_chat_access(forwarder, "Admins cannot forward messages")

        # A deleted original forwards as its placeholder
        original = await self.get_message_or_404(message_id)
        if not target_room_ids:
            raise ValidationException("Please select at least one chat")

        forwarded = []
        for room_id in dict.fromkeys(target_room_ids):
            room = await self.rooms.get_room_or_404(room_id)
            if settings.forward_requires_membership and not room.has_member(forwarder.id):
                raise ForbiddenError("You are not a member of this chat")

            copy = ChatMessage(
                room_id=room.id,
                sender_id=forwarder.id,
                sender_name=forwarder.name,
                content=original.content,
                message_type=original.message_type or MessageType.TEXT.value,
                file_url=original.file_url,
                file_name=original.file_name,
                is_forwarded=True,
            )
            copy.mark_read(forwarder.id)
            forwarded.append(copy)

        self.db.add_all(forwarded)
        await self.db.commit()
        logger.info(f"Message {message_id} forwarded by {user_id} to {len(forwarded)} chats")
        return forwarded

    async def get_forwarded_copies(self, message_ids: List[str], user_id: Optional[str]) -> List[ChatMessage]:
        """Copies made by forward_message, looked up again so they can be announced."""
        if not message_ids:
            raise ValidationException("messageIds is required")

        copies = []
        for message_id in dict.fromkeys(message_ids):
            message = await self.get_message_or_404(message_id)
            if not message.is_forwarded or message.sender_id != user_id:
                raise ForbiddenError("You can only announce messages you forwarded")
            copies.append(message)
        return copies


def _message_type(payload: SendMessagePayload) -> str:
    if payload.message_type in {t.value for t in MessageType}:
        return payload.message_type
    return MessageType.FILE.value if payload.file_url else MessageType.TEXT.value

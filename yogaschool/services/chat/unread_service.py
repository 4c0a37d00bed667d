# yogaschool/services/chat/unread_service.py
"""Unread counts, derived on every call from read receipts and room membership."""
from typing import Dict
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_, exists

from ...models.chat.chat_room import ChatMember
from ...models.chat.chat_message import ChatMessage, MessageReceipt

logger = logging.getLogger(__name__)


class UnreadService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _unread_filter(self, user_id: str):
        my_rooms = select(ChatMember.chat_id).where(ChatMember.user_id == user_id)
        already_read = exists().where(and_(
            MessageReceipt.message_id == ChatMessage.id,
            MessageReceipt.user_id == user_id,
        ))
        return and_(
            ChatMessage.room_id.in_(my_rooms),
            ChatMessage.sender_id != user_id,
            ~already_read,
        )

    async def unread_by_room(self, user_id: str) -> Dict[str, int]:
        stmt = (
            select(ChatMessage.room_id, func.count(ChatMessage.id))
            .where(self._unread_filter(user_id))
            .group_by(ChatMessage.room_id)
        )
        result = await self.db.execute(stmt)
        return {room_id: count for room_id, count in result.all()}

    async def unread_count(self, user_id: str) -> int:
        stmt = select(func.count(ChatMessage.id)).where(self._unread_filter(user_id))
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def mark_room_read(self, room_id: str, user_id: str) -> int:
        """Add user_id to the readers of every message in the room they did not send."""
        stmt = select(ChatMessage.id).where(and_(
            ChatMessage.room_id == room_id,
            ChatMessage.sender_id != user_id,
            ~exists().where(and_(
                MessageReceipt.message_id == ChatMessage.id,
                MessageReceipt.user_id == user_id,
            )),
        ))
        result = await self.db.execute(stmt)
        message_ids = list(result.scalars().all())

        self.db.add_all([MessageReceipt(message_id=message_id, user_id=user_id) for message_id in message_ids])
        await self.db.commit()
        if message_ids:
            logger.info(f"User {user_id} read {len(message_ids)} messages in room {room_id}")
        return len(message_ids)

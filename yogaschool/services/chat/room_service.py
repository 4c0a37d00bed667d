# yogaschool/services/chat/room_service.py
from typing import List, Optional, Tuple
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ..base_service import BaseService
from ..user_service import UserService
from ...core.exceptions import ForbiddenError, NotFoundError, NoOpError, ValidationException
from ...core.permissions import require_chat_access
from ...models.user import User, UserRole
from ...models.chat.chat_room import ChatRoom, ChatMember, direct_message_id
from ...schemas.chat_schemas import ChatResponse, GroupDetailResponse
from ...schemas.user_schemas import UserSummary

logger = logging.getLogger(__name__)

DEFAULT_DM_NAME = "Direct Message"


class RoomService(BaseService[ChatRoom]):
    """Creates, mutates and destroys chat rooms (groups and direct messages)."""

    def __init__(self, db: AsyncSession):
        super().__init__(ChatRoom, db)
        self.users = UserService(db)

    async def get_room_or_404(self, room_id: str) -> ChatRoom:
        chat = await self.get(room_id)
        if not chat:
            raise NotFoundError("Chat", room_id)
        return chat

    async def get_group_or_404(self, group_id: str) -> ChatRoom:
        chat = await self.get(group_id)
        if not chat or not chat.is_group:
            raise NotFoundError("Group", group_id)
        return chat

    async def _get_chat_user(self, user_id: Optional[str], action: str) -> User:
        if not user_id:
            raise ValidationException("User ID is required")
        user = await self.users.get_or_404(user_id)
        require_chat_access(user, f"Admins cannot {action}")
        return user

    async def create_group(self, name: str, member_ids: List[str], creator_id: Optional[str]) -> ChatRoom:
        creator = await self._get_chat_user(creator_id, "create groups")

        group = ChatRoom(name=name, is_group=True, created_by=creator.id)
        for member_id in [*member_ids, creator.id]:
            group.add_member(member_id)

        self.db.add(group)
        await self.db.commit()
        logger.info(f"Group {group.id} created by {creator.id} with {len(group.members)} members")
        return group

    async def delete_group(self, group_id: str, user_id: Optional[str]) -> ChatRoom:
        """Remove a group permanently. Its messages are left in place."""
        group = await self.get_group_or_404(group_id)

        user = await self.users.get(user_id)
        require_chat_access(user, "Admins cannot delete groups")
        if group.created_by != user_id:
            raise ForbiddenError("Only the group creator can delete this group")

        await self.db.delete(group)
        await self.db.commit()
        logger.info(f"Group {group_id} deleted by {user_id}")
        return group

    async def leave_group(self, group_id: str, user_id: Optional[str]) -> Optional[ChatRoom]:
        """Returns the group, or None when the last member left and it was removed."""
        await self._get_chat_user(user_id, "leave groups")
        group = await self.get_group_or_404(group_id)

        group.remove_member(user_id)
        if not group.memberships:
            await self.db.delete(group)
            await self.db.commit()
            logger.info(f"Group {group_id} removed after its last member {user_id} left")
            return None

        await self.db.commit()
        logger.info(f"User {user_id} left group {group_id}")
        return group

    async def add_members(self, group_id: str, actor_id: Optional[str], new_member_ids: List[str]) -> Tuple[int, ChatRoom]:
        if not new_member_ids:
            raise ValidationException("Please provide members to add")

        await self._get_chat_user(actor_id, "add group members")
        group = await self.get_group_or_404(group_id)
        if group.created_by != actor_id:
            raise ForbiddenError("Only the group creator can add members")

        to_add = [member_id for member_id in dict.fromkeys(new_member_ids) if not group.has_member(member_id)]
        if not to_add:
            raise NoOpError("All selected members are already in the group")

        for member_id in to_add:
            group.add_member(member_id)
        await self.db.commit()
        logger.info(f"Added {len(to_add)} members to group {group_id}")
        return len(to_add), group

    async def get_group_detail(self, group_id: str) -> GroupDetailResponse:
        group = await self.get_group_or_404(group_id)
        members = await self.users.get_many(group.members)

        return GroupDetailResponse(
            **ChatResponse.model_validate(group).model_dump(),
            member_details=[UserSummary.model_validate(member) for member in members],
        )

    async def create_or_get_direct_message(self, user_id1: Optional[str], user_id2: Optional[str]) -> ChatRoom:
        await self._get_chat_user(user_id1, "start direct messages")

        user1 = await self.users.get(user_id1)
        user2 = await self.users.get(user_id2)
        if not user1 or not user2:
            raise NotFoundError("User")

        roles = {user1.role, user2.role}
        if roles != {UserRole.TEACHER.value, UserRole.STUDENT.value}:
            raise ForbiddenError("Only teachers and students can chat with each other")

        room_id = direct_message_id(user1.id, user2.id)
        dm = await self.get(room_id)
        if dm:
            return dm

        # The stored name is a snapshot; list_my_chats resolves the live name
        dm = ChatRoom(id=room_id, name=user2.name, is_group=False)
        dm.add_member(user1.id)
        dm.add_member(user2.id)
        self.db.add(dm)
        await self.db.commit()
        logger.info(f"Direct message room {room_id} created")
        return dm

    async def list_my_chats(self, user_id: str) -> List[ChatResponse]:
        user = await self.users.get(user_id)
        require_chat_access(user)

        stmt = (
            select(ChatRoom)
            .join(ChatMember, ChatMember.chat_id == ChatRoom.id)
            .where(ChatMember.user_id == user_id)
            .order_by(ChatRoom.is_group.desc(), ChatRoom.created_at)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        chats = list(result.scalars().unique().all())

        counterpart_ids = [chat.counterpart_of(user_id) for chat in chats if not chat.is_group]
        names = {user.id: user.name for user in await self.users.get_many([i for i in counterpart_ids if i])}

        responses = []
        for chat in chats:
            response = ChatResponse.model_validate(chat)
            if not chat.is_group:
                other_user_id = chat.counterpart_of(user_id)
                response = response.model_copy(update={
                    "name": names.get(other_user_id, DEFAULT_DM_NAME),
                    "other_user_id": other_user_id,
                })
            responses.append(response)
        return responses

    async def member_ids(self, room_id: str) -> List[str]:
        result = await self.db.execute(select(ChatMember.user_id).where(ChatMember.chat_id == room_id))
        return list(result.scalars().all())


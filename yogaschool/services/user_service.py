# yogaschool/services/user_service.py
"""Accounts: signup role bootstrap, credentials, admin deletion cascade."""
from typing import List, Optional
import logging
from passlib.hash import pbkdf2_sha256
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from .base_service import BaseService
from ..core.cache import cache_manager, DIRECTORY_CACHE_KEY
from ..core.config import settings
from ..core.exceptions import NotFoundError, UnauthorizedError, ValidationException, ForbiddenError
from ..models.user import User, UserRole
from ..models.yoga_class import YogaClass
from ..models.chat import ChatRoom, ChatMember, ChatMessage, MessageReceipt
from ..schemas.user_schemas import SignupRequest, UserSummary

logger = logging.getLogger(__name__)

# Signup order decides the role: 1st admin, 2nd teacher, everyone after that student
ROLE_BY_SIGNUP_ORDER = [UserRole.ADMIN, UserRole.TEACHER]


def role_for_signup(existing_users: int) -> UserRole:
    if existing_users < len(ROLE_BY_SIGNUP_ORDER):
        return ROLE_BY_SIGNUP_ORDER[existing_users]
    return UserRole.STUDENT


class UserService(BaseService[User]):
    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email.lower())
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_404(self, user_id: Optional[str]) -> User:
        user = await self.get(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def signup(self, request: SignupRequest) -> User:
        if await self.get_by_email(request.email):
            raise ValidationException("User already exists")

        role = role_for_signup(await self.get_total_count())
        user = await self.create({
            "name": request.name,
            "email": request.email.lower(),
            "hashed_password": pbkdf2_sha256.hash(request.password),
            "role": role.value,
            "security_question": request.security_question,
            "hashed_security_answer": pbkdf2_sha256.hash(request.security_answer),
        })
        await cache_manager.delete(DIRECTORY_CACHE_KEY)
        logger.info(f"User {user.id} signed up as {role.value}")
        return user

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.get_by_email(email)
        if not user or not pbkdf2_sha256.verify(password, user.hashed_password):
            raise UnauthorizedError("Invalid credentials")
        return user

    async def get_security_question(self, email: str) -> str:
        user = await self.get_by_email(email)
        if not user:
            raise NotFoundError("User")
        return user.security_question

    async def reset_password(self, email: str, security_answer: str, new_password: str) -> User:
        user = await self.get_by_email(email)
        if not user:
            raise NotFoundError("User")
        if not pbkdf2_sha256.verify(security_answer, user.hashed_security_answer):
            raise UnauthorizedError("Incorrect security answer")

        user.hashed_password = pbkdf2_sha256.hash(new_password)
        await self.db.commit()
        logger.info(f"Password reset for user {user.id}")
        return user

    async def list_users(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.created_at))
        return list(result.scalars().all())

    async def list_directory(self) -> List[UserSummary]:
        """Everyone except admins, for the start-chat picker"""
        cached = await cache_manager.get(DIRECTORY_CACHE_KEY)
        if cached is not None:
            return cached

        stmt = select(User).where(User.role != UserRole.ADMIN.value).order_by(User.name)
        result = await self.db.execute(stmt)
        directory = [UserSummary.model_validate(user) for user in result.scalars().all()]

        await cache_manager.set(DIRECTORY_CACHE_KEY, directory, ttl=settings.cache_ttl_seconds)
        return directory

    async def require_admin(self, actor_id: Optional[str]) -> User:
        if not actor_id:
            raise UnauthorizedError()
        actor = await self.get(actor_id)
        if not actor or actor.role != UserRole.ADMIN:
            raise ForbiddenError("Forbidden: Admin access required")
        return actor

    async def delete_user(self, user_id: str, actor: User) -> User:
        """Delete an account and everything hanging off it.

        The user leaves every chat (chats left without members are removed),
        every message they ever sent is removed from every room, and their
        classes are dropped. Direct-message rooms keep the remaining member.
        """
        if user_id == actor.id:
            raise ValidationException("Cannot delete your own account")

        user = await self.get_or_404(user_id)

        result = await self.db.execute(
            select(ChatRoom)
            .join(ChatMember, ChatMember.chat_id == ChatRoom.id)
            .where(ChatMember.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        emptied = 0
        for chat in result.scalars().unique().all():
            chat.remove_member(user_id)
            if not chat.memberships:
                await self.db.delete(chat)
                emptied += 1

        # Bulk deletes bypass ORM cascades
        sent_ids = select(ChatMessage.id).where(ChatMessage.sender_id == user_id)
        await self.db.execute(delete(MessageReceipt).where(MessageReceipt.message_id.in_(sent_ids)))
        messages = await self.db.execute(delete(ChatMessage).where(ChatMessage.sender_id == user_id))
        await self.db.execute(delete(YogaClass).where(YogaClass.teacher_id == user_id))
        await self.db.delete(user)
        await self.db.commit()

        await cache_manager.delete(DIRECTORY_CACHE_KEY)
        logger.info(
            f"User {user_id} deleted by {actor.id}: {messages.rowcount} messages removed, "
            f"{emptied} empty chats removed"
        )
        return user


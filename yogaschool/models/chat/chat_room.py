# yogaschool/models/chat/chat_room.py
from typing import List, Optional
from sqlalchemy import Column, String, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from ..base import Base

DM_PREFIX = "dm_"


def direct_message_id(user_id1: str, user_id2: str) -> str:
    """Room id for a 1:1 chat, independent of argument order."""
    first, second = sorted([user_id1, user_id2])
    return f"{DM_PREFIX}{first}_{second}"


class ChatRoom(Base):
    __tablename__ = "chats"

    name = Column(String(200), nullable=True)
    is_group = Column(Boolean, default=False, nullable=False, index=True)
    created_by = Column(String(100), nullable=True)

    # Relationships
    memberships = relationship(
        "ChatMember",
        back_populates="chat",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @property
    def members(self) -> List[str]:
        return [membership.user_id for membership in self.memberships]

    def has_member(self, user_id: str) -> bool:
        return any(membership.user_id == user_id for membership in self.memberships)

    def add_member(self, user_id: str) -> bool:
        if self.has_member(user_id):
            return False
        self.memberships.append(ChatMember(user_id=user_id))
        return True

    def remove_member(self, user_id: str) -> bool:
        for membership in list(self.memberships):
            if membership.user_id == user_id:
                self.memberships.remove(membership)
                return True
        return False

    def counterpart_of(self, user_id: str) -> Optional[str]:
        return next((member for member in self.members if member != user_id), None)


class ChatMember(Base):
    __tablename__ = "chat_members"

    chat_id = Column(String(100), ForeignKey("chats.id", ondelete="CASCADE"), nullable=False, index=True)
    # Plain column: user deletion cleans memberships up explicitly
    user_id = Column(String(100), nullable=False, index=True)

    chat = relationship("ChatRoom", back_populates="memberships")

    __table_args__ = (
        Index('idx_chat_member_unique', 'chat_id', 'user_id', unique=True),
    )

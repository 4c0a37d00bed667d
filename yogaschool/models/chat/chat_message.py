# yogaschool/models/chat/chat_message.py
import enum
import time
from typing import List
from sqlalchemy import Column, String, Text, Boolean, BigInteger, ForeignKey, Index
from sqlalchemy.orm import relationship
from ..base import Base


_last_sequence = 0


def next_sequence() -> int:
    """Strictly increasing within the process, wall-clock ordered across restarts."""
    global _last_sequence
    _last_sequence = max(time.time_ns(), _last_sequence + 1)
    return _last_sequence


class MessageType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    # No foreign key: history outlives a deleted group
    room_id = Column(String(100), nullable=False, index=True)
    sender_id = Column(String(100), nullable=False, index=True)
    sender_name = Column(String(200), nullable=True)
    content = Column(Text, nullable=False, default="")
    message_type = Column(String(10), nullable=False, default=MessageType.TEXT.value)
    file_url = Column(String(500), nullable=True)
    file_name = Column(String(255), nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    is_forwarded = Column(Boolean, default=False, nullable=False)
    # Tie-breaker for messages stored within the same timestamp tick
    sequence = Column(BigInteger, nullable=False, default=next_sequence)

    # Relationships
    receipts = relationship(
        "MessageReceipt",
        back_populates="message",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @property
    def timestamp(self):
        return self.created_at

    @property
    def read_by(self) -> List[str]:
        return [receipt.user_id for receipt in self.receipts]

    def is_read_by(self, user_id: str) -> bool:
        return any(receipt.user_id == user_id for receipt in self.receipts)

    def mark_read(self, user_id: str) -> bool:
        if self.is_read_by(user_id):
            return False
        self.receipts.append(MessageReceipt(user_id=user_id))
        return True

    # Index for efficient queries
    __table_args__ = (
        Index('idx_chat_message_room_time', 'room_id', 'created_at', 'sequence'),
    )


class MessageReceipt(Base):
    __tablename__ = "message_receipts"

    message_id = Column(String(100), ForeignKey("chat_messages.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(100), nullable=False, index=True)

    message = relationship("ChatMessage", back_populates="receipts")

    __table_args__ = (
        Index('idx_message_receipt_unique', 'message_id', 'user_id', unique=True),
    )

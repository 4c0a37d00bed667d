from sqlalchemy import Column, String, DateTime
from .base import Base

class YogaClass(Base):
    """Scheduled online class; managed outside the chat service."""
    __tablename__ = "classes"

    teacher_id = Column(String(100), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    scheduled_at = Column(DateTime(timezone=True), nullable=True)
    meeting_link = Column(String(500), nullable=True)

# yogaschool/models/__init__.py
"""Import all models here, if needed for Alembic migration."""
from .base import Base

from .user import User, UserRole
from .yoga_class import YogaClass
from .chat import ChatRoom, ChatMember, ChatMessage, MessageReceipt

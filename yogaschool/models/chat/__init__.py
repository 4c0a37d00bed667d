# yogaschool/models/chat/__init__.py
from .chat_room import ChatRoom, ChatMember
from .chat_message import ChatMessage, MessageReceipt

__all__ = ["ChatRoom", "ChatMember", "ChatMessage", "MessageReceipt"]

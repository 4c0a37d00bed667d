# yogaschool/schemas/chat_schemas.py
"""Pydantic schemas for rooms, messages and realtime frames."""
from typing import Dict, List, Optional
from datetime import datetime
from pydantic import Field

from .base import CamelModel
from .user_schemas import UserSummary


# Requests

class CreateGroupRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    members: List[str] = Field(default_factory=list)
    created_by: Optional[str] = None


class ActorRequest(CamelModel):
    user_id: Optional[str] = None


class AddMembersRequest(CamelModel):
    user_id: Optional[str] = None
    new_members: List[str] = Field(default_factory=list)


class DirectMessageRequest(CamelModel):
    user_id1: Optional[str] = None
    user_id2: Optional[str] = None


class ForwardMessageRequest(CamelModel):
    message_id: Optional[str] = None
    target_chat_ids: List[str] = Field(default_factory=list)
    user_id: Optional[str] = None


class SendMessagePayload(CamelModel):
    room_id: Optional[str] = None
    sender_id: Optional[str] = None
    content: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    message_type: Optional[str] = None


# Responses

class ChatResponse(CamelModel):
    id: str
    name: Optional[str] = None
    is_group: bool
    members: List[str]
    created_by: Optional[str] = None
    created_at: datetime
    other_user_id: Optional[str] = None


class GroupDetailResponse(ChatResponse):
    member_details: List[UserSummary]


class DeleteGroupResponse(CamelModel):
    message: str
    group_id: str


class AddMembersResponse(CamelModel):
    message: str
    added_count: int
    group: ChatResponse


class MessageResponse(CamelModel):
    id: str
    room_id: str
    sender_id: str
    sender_name: Optional[str] = None
    content: str
    message_type: str
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    is_deleted: bool
    is_forwarded: bool
    read_by: List[str]
    timestamp: datetime


class DeleteMessageResponse(CamelModel):
    message: str
    message_id: str


class ForwardMessageResponse(CamelModel):
    message: str
    forwarded_messages: List[MessageResponse]


class UnreadCountResponse(CamelModel):
    unread_count: int
    by_room: Dict[str, int] = Field(default_factory=dict)


class MarkReadResponse(CamelModel):
    success: bool
    marked_count: int = 0


class UploadResponse(CamelModel):
    success: bool
    file_url: str
    file_name: str
    file_size: int
    message_type: str

# yogaschool/routers/chat/chat_router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.exceptions import ValidationException
from ...core.permissions import require_chat_access
from ...schemas.chat_schemas import (
    ActorRequest, AddMembersRequest, AddMembersResponse, ChatResponse, CreateGroupRequest,
    DeleteGroupResponse, DeleteMessageResponse, DirectMessageRequest, ForwardMessageRequest,
    ForwardMessageResponse, GroupDetailResponse, MarkReadResponse, MessageResponse,
    UnreadCountResponse, UploadResponse,
)
from ...schemas.user_schemas import UserSummary
from ...services.chat import RoomService, MessageService, UnreadService
from ...services.chat.attachment_service import save_chat_attachment
from ...services.user_service import UserService

router = APIRouter(prefix="/api/v1/chat", tags=["Chat System"])

# Routes here only persist. Clients announce group, leave, delete and forward
# changes over /ws/chat once the request has succeeded.


@router.get("/users", response_model=List[UserSummary])
async def list_directory(db: AsyncSession = Depends(get_db)):
    """All non-admin users, for starting a chat"""
    return await UserService(db).list_directory()


@router.post("/groups", response_model=ChatResponse, status_code=status.HTTP_201_CREATED)
async def create_group(request: CreateGroupRequest, db: AsyncSession = Depends(get_db)):
    return await RoomService(db).create_group(request.name, request.members, request.created_by)


@router.delete("/groups/{group_id}", response_model=DeleteGroupResponse)
async def delete_group(group_id: str, request: ActorRequest, db: AsyncSession = Depends(get_db)):
    """Delete a group (creator only). Messages stay addressable by id."""
    await RoomService(db).delete_group(group_id, request.user_id)
    return DeleteGroupResponse(message="Group deleted successfully", group_id=group_id)


@router.post("/groups/{group_id}/leave")
async def leave_group(group_id: str, request: ActorRequest, db: AsyncSession = Depends(get_db)):
    await RoomService(db).leave_group(group_id, request.user_id)
    return {"message": "Left group successfully"}


@router.post("/groups/{group_id}/add-members", response_model=AddMembersResponse)
async def add_members(group_id: str, request: AddMembersRequest, db: AsyncSession = Depends(get_db)):
    added_count, group = await RoomService(db).add_members(group_id, request.user_id, request.new_members)
    return AddMembersResponse(
        message="Members added successfully",
        added_count=added_count,
        group=ChatResponse.model_validate(group),
    )


@router.get("/groups/{group_id}", response_model=GroupDetailResponse)
async def get_group_detail(group_id: str, db: AsyncSession = Depends(get_db)):
    return await RoomService(db).get_group_detail(group_id)


@router.post("/dm", response_model=ChatResponse)
async def create_or_get_direct_message(request: DirectMessageRequest, db: AsyncSession = Depends(get_db)):
    """Same pair of users, same room, whichever side asks"""
    return await RoomService(db).create_or_get_direct_message(request.user_id1, request.user_id2)


@router.get("/my-chats/{user_id}", response_model=List[ChatResponse])
async def list_my_chats(user_id: str, db: AsyncSession = Depends(get_db)):
    return await RoomService(db).list_my_chats(user_id)


@router.post("/messages/forward", response_model=ForwardMessageResponse)
async def forward_message(request: ForwardMessageRequest, db: AsyncSession = Depends(get_db)):
    forwarded = await MessageService(db).forward_message(request.message_id, request.target_chat_ids, request.user_id)
    return ForwardMessageResponse(
        message="Message forwarded successfully",
        forwarded_messages=[MessageResponse.model_validate(message) for message in forwarded],
    )


@router.post("/messages/upload", response_model=UploadResponse)
async def upload_attachment(
    file: UploadFile = File(...),
    user_id: Optional[str] = Form(None, alias="userId"),
    db: AsyncSession = Depends(get_db)
):
    """Store a chat attachment; the client then sends its fileUrl over the socket"""
    if not user_id:
        raise ValidationException("User ID is required")
    user = await UserService(db).get_or_404(user_id)
    require_chat_access(user, "Admins have read-only access to chats")
    return await save_chat_attachment(file)


@router.get("/messages/{room_id}/{user_id}", response_model=List[MessageResponse])
async def fetch_messages(room_id: str, user_id: str, db: AsyncSession = Depends(get_db)):
    return await MessageService(db).fetch_messages(room_id, user_id)


@router.delete("/messages/{message_id}", response_model=DeleteMessageResponse)
async def delete_message(message_id: str, request: ActorRequest, db: AsyncSession = Depends(get_db)):
    await MessageService(db).soft_delete_message(message_id, request.user_id)
    return DeleteMessageResponse(message="Message deleted successfully", message_id=message_id)


@router.get("/unread-count/{user_id}", response_model=UnreadCountResponse)
async def get_unread_count(user_id: str, db: AsyncSession = Depends(get_db)):
    service = UnreadService(db)
    by_room = await service.unread_by_room(user_id)
    return UnreadCountResponse(unread_count=sum(by_room.values()), by_room=by_room)


@router.post("/mark-read/{room_id}", response_model=MarkReadResponse)
async def mark_room_read(room_id: str, request: ActorRequest, db: AsyncSession = Depends(get_db)):
    if not request.user_id:
        raise ValidationException("User ID is required")
    marked = await UnreadService(db).mark_room_read(room_id, request.user_id)
    return MarkReadResponse(success=True, marked_count=marked)

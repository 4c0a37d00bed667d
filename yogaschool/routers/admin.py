"""Admin-only user management."""
from typing import Optional
from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..models.user import User
from ..schemas.user_schemas import DeletedUserResponse, UserListResponse, UserResponse, UserSummary
from ..services.user_service import UserService

router = APIRouter(prefix="/api/v1/admin", tags=["Admin"])


async def get_admin(
    actor_id: Optional[str] = Header(None, alias="user-id"),
    db: AsyncSession = Depends(get_db)
) -> User:
    return await UserService(db).require_admin(actor_id)


@router.get("/users", response_model=UserListResponse)
async def list_users(admin: User = Depends(get_admin), db: AsyncSession = Depends(get_db)):
    users = await UserService(db).list_users()
    return UserListResponse(users=[UserResponse.model_validate(user) for user in users])


@router.delete("/users/{user_id}", response_model=DeletedUserResponse)
async def delete_user(user_id: str, admin: User = Depends(get_admin), db: AsyncSession = Depends(get_db)):
    """Delete a user and cascade to their chats, messages and classes"""
    user = await UserService(db).delete_user(user_id, admin)
    return DeletedUserResponse(message="User deleted successfully", deleted_user=UserSummary.model_validate(user))

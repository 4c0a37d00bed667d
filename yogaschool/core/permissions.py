# yogaschool/core/permissions.py
"""Role checks shared by every chat operation."""
from typing import Optional

from .exceptions import ForbiddenError
from ..models.user import User, UserRole


def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role == UserRole.ADMIN


def can_access_chat(user: Optional[User]) -> bool:
    """Admins have no visibility into the chat system at all."""
    return not is_admin(user)


def require_chat_access(user: Optional[User], message: str = "Admins do not have access to the chat system"):
    if not can_access_chat(user):
        raise ForbiddenError(message)

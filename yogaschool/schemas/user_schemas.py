# yogaschool/schemas/user_schemas.py
"""Pydantic schemas for accounts and the user directory."""
from typing import List, Optional
from datetime import datetime
from pydantic import EmailStr, Field

from .base import CamelModel


class SignupRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=1)
    security_question: str = Field(..., min_length=1, max_length=500)
    security_answer: str = Field(..., min_length=1)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class VerifyEmailRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    email: EmailStr
    security_answer: str
    new_password: str = Field(..., min_length=1)


class UserSummary(CamelModel):
    """Directory entry: no secrets."""
    id: str
    name: str
    email: str
    role: str


class UserResponse(UserSummary):
    security_question: str
    profile_image: Optional[str] = None
    created_at: datetime


class AuthResponse(CamelModel):
    user: UserResponse
    message: str


class UserListResponse(CamelModel):
    users: List[UserResponse]


class DeletedUserResponse(CamelModel):
    message: str
    deleted_user: UserSummary

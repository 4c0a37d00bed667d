"""Signup, login and security-question password reset."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..schemas.user_schemas import (
    AuthResponse, LoginRequest, ResetPasswordRequest, SignupRequest, UserResponse, VerifyEmailRequest,
)
from ..services.user_service import UserService

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])

@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(request: SignupRequest, db: AsyncSession = Depends(get_db)):
    """First account becomes admin, second teacher, the rest students"""
    user = await UserService(db).signup(request)
    return AuthResponse(user=UserResponse.model_validate(user), message="User created successfully")

@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await UserService(db).authenticate(request.email, request.password)
    return AuthResponse(user=UserResponse.model_validate(user), message="Login successful")

@router.post("/forgot-password/verify-email")
async def verify_email(request: VerifyEmailRequest, db: AsyncSession = Depends(get_db)):
    question = await UserService(db).get_security_question(request.email)
    return {"securityQuestion": question}

@router.post("/forgot-password/reset")
async def reset_password(request: ResetPasswordRequest, db: AsyncSession = Depends(get_db)):
    await UserService(db).reset_password(request.email, request.security_answer, request.new_password)
    return {"message": "Password reset successful"}

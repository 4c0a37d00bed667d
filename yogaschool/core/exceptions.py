# yogaschool/core/exceptions.py
"""Custom exceptions for the yoga school application."""
from fastapi import Request
from fastapi.responses import JSONResponse
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class YogaSchoolException(Exception):
    """Base exception for yoga school application."""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class UnauthorizedError(YogaSchoolException):
    """Actor identity is missing or does not match."""
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ForbiddenError(YogaSchoolException):
    """Actor is known but a role or ownership rule forbids the action."""
    status_code = 403

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message)


class NotFoundError(YogaSchoolException):
    """Resource not found exception"""
    status_code = 404

    def __init__(self, resource: str, id: Optional[str] = None):
        message = f"{resource} not found"
        if id:
            message += f" with id: {id}"
        super().__init__(message)


class ValidationException(YogaSchoolException):
    """Validation error exception"""
    status_code = 400


class NoOpError(YogaSchoolException):
    """Raised when a mutation would change nothing."""
    status_code = 400


async def yoga_school_exception_handler(request: Request, exc: YogaSchoolException):
    """Handle application exceptions"""
    logger.warning(f"{exc.__class__.__name__}: {exc.message} - Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "type": exc.__class__.__name__}
    )

async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unexpected error: {str(exc)} - Path: {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "type": "InternalError"}
    )

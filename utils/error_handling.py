"""
Centralized error types and helpers for consistent error responses
"""

from contextlib import contextmanager
from typing import Optional

from fastapi import status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from utils.logging_config import logger


class PlatformError(Exception):
    """Base class for errors raised by the platform services.

    ``status_code`` and ``code`` are read by the HTTP layer; ``message`` is the
    fixed client-facing text for the error kind.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "PLATFORM_ERROR"
    message = "Request could not be completed"

    def __init__(self, detail: Optional[str] = None, **context):
        super().__init__(detail or self.message)
        self.detail = detail
        self.context = context


class NotEnrolledError(PlatformError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_ENROLLED"
    message = "Student is not registered for this course"


class AlreadyEnrolledError(PlatformError):
    status_code = status.HTTP_409_CONFLICT
    code = "ALREADY_ENROLLED"
    message = "Already registered"


class CourseNotFoundError(PlatformError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "COURSE_NOT_FOUND"
    message = "Course not found"


class QuizNotFoundError(PlatformError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "QUIZ_NOT_FOUND"
    message = "Quiz not found"


class ForbiddenError(PlatformError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    message = "Access denied"


class InvalidQuestionError(PlatformError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_QUESTION"
    message = "Each question needs text, four options and a correct answer of A, B, C or D"


class DuplicateAttemptError(PlatformError):
    status_code = status.HTTP_409_CONFLICT
    code = "DUPLICATE_ATTEMPT"
    message = "Quiz has already been attempted"


class PersistenceError(PlatformError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "PERSISTENCE_ERROR"
    message = "Database operation failed. Please try again later."


class UnauthenticatedError(PlatformError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"
    message = "Failed to authenticate token"


class InvalidCredentialsError(PlatformError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_CREDENTIALS"
    message = "Invalid username or password"


class UsernameTakenError(PlatformError):
    status_code = status.HTTP_409_CONFLICT
    code = "USERNAME_TAKEN"
    message = "Username already exists"


class UserNotFoundError(PlatformError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "USER_NOT_FOUND"
    message = "User not found"


class InvalidUploadError(PlatformError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_UPLOAD"
    message = "Missing or invalid file"


@contextmanager
def safe_database_operation(db: Session, operation_name: str):
    """
    Run a unit of work with automatic rollback.

    Platform errors raised inside the block are re-raised after the rollback;
    any SQLAlchemy failure surfaces as PersistenceError.

    Usage:
        with safe_database_operation(db, "record watch"):
            db.add(event)
            db.commit()
    """
    try:
        yield
    except PlatformError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error during {operation_name}: {e}")
        raise PersistenceError(f"{operation_name} failed") from e


def log_operation_success(operation: str, details: Optional[str] = None) -> None:
    """Log successful operations for audit purposes"""
    if details:
        logger.info(f"Operation successful: {operation} - {details}")
    else:
        logger.info(f"Operation successful: {operation}")


def error_payload(error: str, status_code: int, code: Optional[str] = None, detail=None, request=None) -> dict:
    """Standard error body shared by every exception handler"""
    state = getattr(request, "state", None)
    return {
        "success": False,
        "error": error,
        "code": code,
        "detail": detail if detail is not None else error,
        "status_code": status_code,
        "request_id": getattr(state, "request_id", None),
        "correlation_id": getattr(state, "correlation_id", None),
    }

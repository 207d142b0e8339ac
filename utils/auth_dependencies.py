"""
FastAPI Authentication Dependencies
Provides dependency injection for identity and role checks across routes
"""

from typing import Optional

from fastapi import Depends, Header, Request

from models import UserRole
from utils.error_handling import ForbiddenError, UnauthenticatedError
from utils.jwt_utils import Identity, jwt_manager
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("auth")


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """Accept either a bare token or 'Bearer <token>'"""
    if not authorization:
        return None
    authorization = authorization.strip()
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return authorization


async def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None, description="Access token, optionally prefixed with 'Bearer '"),
) -> Identity:
    """
    Verify the caller's token - raises 401 if missing or invalid
    """
    try:
        identity = jwt_manager.verify(extract_token(authorization))
    except UnauthenticatedError as e:
        logger.warning(
            "Authentication failed",
            category=LogCategory.AUTHENTICATION,
            request_path=request.url.path,
            error_message=str(e),
        )
        raise

    request.state.user_id = identity.user_id
    return identity


def require_role(*roles: UserRole):
    """
    Factory for guards that admit only the given roles
    """

    async def role_guard(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in roles:
            logger.warning(
                "Role check failed",
                category=LogCategory.AUTHENTICATION,
                user_id=identity.user_id,
                extra={"role": identity.role.value, "required": [role.value for role in roles]},
            )
            raise ForbiddenError(role=identity.role.value)
        return identity

    return role_guard


require_student = require_role(UserRole.STUDENT)
require_teacher = require_role(UserRole.TEACHER)
require_admin = require_role(UserRole.ADMIN)

"""JWT utilities for user sessions"""

import jwt
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from config import settings
from models import UserRole
from utils.error_handling import UnauthenticatedError


@dataclass(frozen=True)
class Identity:
    """Verified caller attached to a request"""

    user_id: int
    role: UserRole


class JWTManager:
    """Issues and verifies the access tokens handed out at login"""

    def __init__(self, secret: Optional[str] = None, algorithm: Optional[str] = None, expire_hours: Optional[int] = None):
        self.secret = secret or settings.JWT_SECRET
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.expire_hours = expire_hours or settings.JWT_EXPIRE_HOURS
        self.issuer = "elearning-api"

    def create_access_token(self, user_id: int, role: UserRole, expires_hours: Optional[int] = None) -> str:
        """
        Create a signed access token

        Args:
            user_id: The internal user ID
            role: Role claim checked by route guards
            expires_hours: Token lifetime (defaults to JWT_EXPIRE_HOURS)
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "role": role.value,
            "iat": now,
            "exp": now + timedelta(hours=expires_hours or self.expire_hours),
            "iss": self.issuer,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Identity:
        """
        Verify a token and return the identity it carries

        Raises:
            UnauthenticatedError: missing, expired, tampered or malformed token
        """
        if not token:
            raise UnauthenticatedError("no token provided")

        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm], issuer=self.issuer)
        except jwt.ExpiredSignatureError as e:
            raise UnauthenticatedError("token expired") from e
        except jwt.InvalidTokenError as e:
            raise UnauthenticatedError("invalid token") from e

        try:
            return Identity(user_id=int(payload["sub"]), role=UserRole(payload["role"]))
        except (KeyError, TypeError, ValueError) as e:
            raise UnauthenticatedError("token claims are incomplete") from e


# Global instance
jwt_manager = JWTManager()

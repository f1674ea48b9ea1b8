"""
Caller role resolution from the ``Authorization`` header.
"""

import enum
import logging
from typing import Optional

import jwt

from config.settings import settings

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    ADMIN = "Admin"
    USER = "User"
    ANONYMOUS = "Anonymous"


class RoleResolver:
    """Reads the role claim from a bearer JWT.

    The role lives in ``app_metadata.role``. A missing, malformed or expired
    token resolves to ``Anonymous``; resolution never fails a request.
    """

    def __init__(self, secret: str = settings.jwt_secret, algorithm: str = settings.jwt_algorithm):
        self.secret = secret
        self.algorithm = algorithm

    def resolve(self, authorization: Optional[str]) -> Role:
        token = self._extract_bearer_token(authorization)
        if not token:
            return Role.ANONYMOUS

        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_aud": False},
            )
        except jwt.PyJWTError as e:
            logger.debug(f"Rejected bearer token: {e}")
            return Role.ANONYMOUS

        role = (claims.get("app_metadata") or {}).get("role")
        if role == Role.ADMIN.value:
            return Role.ADMIN
        return Role.USER

    @staticmethod
    def _extract_bearer_token(header: Optional[str]) -> Optional[str]:
        if not header:
            return None
        try:
            scheme, token = header.split(" ", 1)
        except ValueError:
            return None
        if scheme.lower() != "bearer":
            return None
        return token.strip() or None

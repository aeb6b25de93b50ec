"""JWT authorization gate: bearer token in, principal out."""
from datetime import datetime, timedelta, timezone
import logging
from typing import Optional

from jose import JWTError, jwt

from tutorgroups.errors import Forbidden, Unauthorized
from tutorgroups.models import Principal, UserRole

logger = logging.getLogger(__name__)


class AuthorizationGate:
    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    def create_access_token(self, subject: str, role: str, *, expires_in: Optional[timedelta] = None) -> str:
        expire = datetime.now(timezone.utc) + (expires_in or timedelta(minutes=self._expire_minutes))
        to_encode = {"sub": subject, "role": role, "exp": expire, "type": "access"}
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def authorize(self, token: Optional[str]) -> Principal:
        if not token:
            raise Unauthorized("Not authenticated")
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError:
            raise Unauthorized("Invalid or expired token")

        subject = payload.get("sub")
        if not subject or payload.get("type") != "access":
            raise Unauthorized("Invalid token")
        try:
            role = UserRole(payload.get("role"))
        except ValueError:
            logger.warning("Rejected token for %s with role %r", subject, payload.get("role"))
            raise Forbidden("This role may not manage tutoring groups")
        return Principal(principal_id=subject, role=role)

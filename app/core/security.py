import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt

from app.core.config import settings
from app.core.constants import RoleEnum

ALGORITHM = "HS256"


def create_access_token(user_id: int, role: Optional[RoleEnum] = None, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a token in the shape the identity provider hands to clients.

    Used by the seed script and the test suite; production tokens come from
    the external identity provider signed with the same secret.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": str(user_id), "exp": expire, "jti": str(uuid.uuid4())}
    if role is not None:
        to_encode["role"] = RoleEnum(role).value
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])

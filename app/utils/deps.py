from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.core.database import get_db
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.core.security import decode_access_token
from app.crud.user import user as user_crud
from app.models.user import User
from app.schemas.token import TokenPayload

http_bearer = HTTPBearer()
optional_http_bearer = HTTPBearer(auto_error=False)

__all__ = [
    "get_db",
    "get_current_user",
    "get_optional_user",
    "require_role",
]


def _resolve_user(db: Session, token: str) -> User:
    try:
        token_data = TokenPayload(**decode_access_token(token))
    except JWTError:
        raise UnauthorizedError("Could not validate credentials")
    except ValidationError:
        raise UnauthorizedError("Invalid token payload")

    if not token_data.sub or not token_data.sub.isdigit():
        raise UnauthorizedError("Invalid token payload")

    user = user_crud.get(db, id=int(token_data.sub))
    if not user:
        raise UnauthorizedError("User not found")
    return user


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(http_bearer),
) -> User:
    return _resolve_user(db, credentials.credentials)


def get_optional_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_http_bearer),
) -> Optional[User]:
    """Anonymous-safe variant: no token means no user, a bad token is still rejected."""
    if credentials is None:
        return None
    return _resolve_user(db, credentials.credentials)


def require_role(*roles: RoleEnum):
    """Dependency that returns the current user when their stored role is one of ``roles``."""
    allowed = {RoleEnum(r) for r in roles}

    def _verify_role(current_user: User = Depends(get_current_user)) -> User:
        if RoleEnum(current_user.role) not in allowed:
            raise ForbiddenError()
        return current_user

    return _verify_role

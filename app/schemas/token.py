from pydantic import BaseModel
from app.core.constants import RoleEnum

class TokenPayload(BaseModel):
    sub: str | None = None
    role: RoleEnum | None = None
    jti: str | None = None
    exp: int | None = None

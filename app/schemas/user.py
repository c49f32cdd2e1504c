from pydantic import BaseModel, EmailStr, ConfigDict
from typing import Optional
from datetime import datetime

from app.core.constants import RoleEnum

class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: EmailStr
    first_name: str = ""
    last_name: str = ""

class UserCreate(UserBase):
    """Schema for registering a user known to the identity provider."""
    role: RoleEnum = RoleEnum.STUDENT

class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[RoleEnum] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = None

class User(UserBase):
    """Main user schema for reading user data."""
    id: int
    role: RoleEnum
    location: Optional[str] = None
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from .common import StrId


class CreateUserRequest(BaseModel):
    email: str = Field(..., pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    surname: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    surname: Optional[str] = Field(None, min_length=1)
    avatar_url: Optional[str] = None


class UserSummary(BaseModel):
    id: StrId
    name: str
    surname: str
    email: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserProfile(BaseModel):
    id: StrId
    email: str
    name: str
    surname: str
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserProfile

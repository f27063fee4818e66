from typing import Optional
from pydantic import BaseModel, Field

from hestia.schemas.base import CamelRequest


# ---------- register ----------
class RegisterRequest(CamelRequest):
    email: str = Field(..., min_length=3, max_length=255)
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., alias="confirmPassword")


# ---------- login ----------
class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    message: str
    username: str
    access_token: str
    token_type: str = "bearer"


# ---------- profile ----------
class CurrentUserResponse(BaseModel):
    username: str


class ProfileResponse(BaseModel):
    success: bool = True
    username: str
    name: str
    connections: int
    intro: Optional[str]


class ProfilePictureResponse(BaseModel):
    success: bool
    profile_pic: Optional[str] = None
    error: Optional[str] = None


class SearchUserResponse(BaseModel):
    success: bool
    username: Optional[str] = None
    message: Optional[str] = None

"""
User / auth request and response schemas.
"""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.db.models import RoleEnum


class RegisterRequest(BaseModel):
    """Payload for POST /user/register."""

    user_name: str = Field(..., max_length=256)
    name: str = Field(..., max_length=256)
    password: str
    role: RoleEnum | None = None

    @field_validator("user_name", "name")
    @classmethod
    def require_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        # bcrypt only looks at the first 72 bytes
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password cannot exceed 72 bytes")
        return v


class LoginRequest(BaseModel):
    """Payload for POST /user/login."""

    user_name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserDataResponse(BaseModel):
    """Public-facing user summary."""

    id: str
    user_name: str
    name: str | None

    model_config = ConfigDict(from_attributes=True)


class UserResponse(UserDataResponse):
    """Admin view of a user account."""

    role: RoleEnum


class LoginResult(BaseModel):
    user: UserDataResponse
    role: RoleEnum
    token: str


class ApiResponse(BaseModel):
    """Envelope returned by register/login."""

    status_code: int
    is_success: bool = True
    error_messages: list[str] = Field(default_factory=list)
    result: Any = None

"""Pydantic models for API request/response."""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from domain.model.user import User, UserRole


class SignupRequest(BaseModel):
    """Request model for user signup. Any ``role`` in the body is ignored."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, max_length=100)
    email: EmailStr
    password: str
    password_confirm: str = Field(..., alias="passwordConfirm")


class LoginRequest(BaseModel):
    """Request model for login. Missing fields are reported by the service."""
    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: str
    password_confirm: str = Field(..., alias="passwordConfirm")


class UpdatePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password_current: str = Field(..., alias="passwordCurrent")
    password: str
    password_confirm: str = Field(..., alias="passwordConfirm")



class UpdateMeRequest(BaseModel):
    """Request model for profile changes. Any ``role`` in the body is ignored.

    Password fields are accepted only so the route can point callers to
    update-my-password instead.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    password_confirm: Optional[str] = Field(None, alias="passwordConfirm")

class UserResponse(BaseModel):
    """Outward representation of a user. Never carries credentials."""
    id: str
    name: Optional[str] = None
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserData(BaseModel):
    user: Optional[UserResponse] = None


class AuthResponse(BaseModel):
    """Response model for flows that sign the user in."""
    status: Literal["success"] = "success"
    token: str
    data: UserData


class UserEnvelope(BaseModel):
    status: Literal["success"] = "success"
    data: UserData


class MessageResponse(BaseModel):
    status: Literal["success"] = "success"
    message: Optional[str] = None

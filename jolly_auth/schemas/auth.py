"""Pydantic schemas for user and authentication endpoints.

Request fields are optional at the schema level; presence and length checks
happen in ``AuthService`` so that they surface as 400 ``ValidationError``.
"""

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class UpdateUserRequest(BaseModel):
    name: str | None = None
    photo: str | None = None
    phone: str | None = None
    bio: str | None = None


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_password: str | None = Field(default=None, alias="oldPassword")
    password: str | None = None


class ForgotPasswordRequest(BaseModel):
    email: str | None = None


class ResetPasswordRequest(BaseModel):
    password: str | None = None


class PublicUser(BaseModel):
    """User fields safe to return to a client. Has no password field."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    photo: str | None = None
    phone: str | None = None
    bio: str | None = None


class AuthenticatedUser(PublicUser):
    token: str


class MessageResponse(BaseModel):
    message: str


class ForgotPasswordResponse(BaseModel):
    success: bool
    message: str

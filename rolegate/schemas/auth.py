"""
Authentication schemas.
"""

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Sign-in request. ``identifier`` is an email or username per login method."""
    identifier: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    """Session token response."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserResponse(BaseModel):
    """User response schema."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    username: str
    is_active: bool


class MessageResponse(BaseModel):
    message: str

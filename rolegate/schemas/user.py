"""
User input schemas.
"""

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator

from rolegate.schemas.validation import check_length, check_pattern, context_limits


class UserCreate(BaseModel):
    """User registration input, checked before the password is hashed."""
    email: EmailStr
    username: str
    password: str = Field(repr=False)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str, info: ValidationInfo) -> str:
        limits = context_limits(info)
        check_length("username", v, limits.username_min_length, limits.username_max_length)
        return check_pattern("username", v, limits.username_pattern)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str, info: ValidationInfo) -> str:
        limits = context_limits(info)
        check_length("password", v, limits.password_min_length, limits.password_max_length)
        return check_pattern("password", v, limits.password_pattern)

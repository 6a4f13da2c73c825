"""
Pydantic request/response and input schemas.
"""

from .auth import LoginRequest, TokenResponse, UserResponse, MessageResponse
from .rbac import RoleCreate, PermissionCreate, RuleCreate
from .user import UserCreate
from .validation import validate_input

__all__ = [
    "LoginRequest",
    "TokenResponse",
    "UserResponse",
    "MessageResponse",
    "UserCreate",
    "RoleCreate",
    "PermissionCreate",
    "RuleCreate",
    "validate_input",
]

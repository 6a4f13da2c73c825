"""
API dependencies.
"""

from .database import get_db, get_gate
from .auth import authenticated, rbac_protected, TokenUser, CookieUser

__all__ = [
    "get_db",
    "get_gate",
    "authenticated",
    "rbac_protected",
    "TokenUser",
    "CookieUser",
]

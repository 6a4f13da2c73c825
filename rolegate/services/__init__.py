"""
Business logic services.
"""

from rolegate.services.authenticator import CredentialAuthenticator, LoginMethod
from rolegate.services.session import SessionManager, AuthStrategy, extract_token

__all__ = [
    "CredentialAuthenticator",
    "LoginMethod",
    "SessionManager",
    "AuthStrategy",
    "extract_token",
]

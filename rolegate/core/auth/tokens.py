"""
Session token generation.
"""

import secrets
from abc import ABC, abstractmethod


class TokenGenerator(ABC):
    """Produces opaque, unguessable session tokens."""

    @abstractmethod
    def generate(self) -> str:
        ...


class SecureTokenGenerator(TokenGenerator):
    """URL-safe random tokens from the OS CSPRNG."""

    def __init__(self, nbytes: int = 32):
        if nbytes < 16:
            raise ValueError("Session tokens need at least 16 bytes of entropy")
        self.nbytes = nbytes

    def generate(self) -> str:
        return secrets.token_urlsafe(self.nbytes)

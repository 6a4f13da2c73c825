"""
Password hashing.
"""

from abc import ABC, abstractmethod

from passlib.context import CryptContext


class PasswordHasher(ABC):
    """One-way salted hashing for stored credentials."""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Hash a password."""
        ...

    @abstractmethod
    def verify(self, password: str, hashed: str) -> bool:
        """Verify password against hash. Malformed hashes never verify."""
        ...


class BcryptPasswordHasher(PasswordHasher):
    """
    bcrypt via passlib.

    Usage:
        hasher = BcryptPasswordHasher(rounds=12)
        stored = hasher.hash("s3cret")
        hasher.verify("s3cret", stored)  # True
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            return self._context.verify(password, hashed)
        except ValueError:
            # Not a recognizable bcrypt hash
            return False

"""
Exception hierarchy.

Every error raised across the public boundary derives from RoleGateError and
carries the HTTP status it maps to:

- InvalidInput (422): user or RBAC record fields rejected before writing
- AuthenticationError (401): bad credentials, invalid or expired session
- AuthorizationError (403): RBAC or rule denial
- InfrastructureError (503): store or cache unreachable, or timed out
- MigrationError: migration runner outcomes
"""

from typing import Any, Optional


class RoleGateError(Exception):
    """Base exception for all rolegate errors."""

    status_code: int = 500
    error_code: str = "internal_error"
    default_message: str = "An error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


# ============================================================
# INPUT
# ============================================================

class InvalidInput(RoleGateError):
    """User or RBAC record fields failed validation; nothing was written."""

    status_code = 422
    error_code = "validation_error"
    default_message = "Invalid input"


# ============================================================
# AUTHENTICATION
# ============================================================

class AuthenticationError(RoleGateError):
    """Caller could not be authenticated."""

    status_code = 401
    error_code = "unauthenticated"
    default_message = "Authentication required"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        clear_cookie: Optional[str] = None,
    ):
        super().__init__(message, details)
        self.clear_cookie = clear_cookie


class InvalidCredentials(AuthenticationError):
    """Unknown identifier, wrong password and inactive user all look the same."""

    error_code = "invalid_credentials"
    default_message = "Invalid credentials"


class InvalidSession(AuthenticationError):
    """Session token missing, never issued, expired or revoked."""

    error_code = "invalid_session"
    default_message = "Invalid or expired session"


# ============================================================
# AUTHORIZATION
# ============================================================

class AuthorizationError(RoleGateError):
    """Authenticated caller is not allowed to perform the operation."""

    status_code = 403
    error_code = "forbidden"
    default_message = "Permission denied"

    def __init__(
        self,
        message: Optional[str] = None,
        rule_name: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.rule_name = rule_name


# ============================================================
# INFRASTRUCTURE
# ============================================================

class InfrastructureError(RoleGateError):
    """Backing store or cache failed. Never a decision either way."""

    status_code = 503
    error_code = "service_unavailable"
    default_message = "Service temporarily unavailable"


class DatabaseUnavailable(InfrastructureError):
    error_code = "database_unavailable"
    default_message = "Relational store unavailable"


class CacheUnavailable(InfrastructureError):
    error_code = "cache_unavailable"
    default_message = "Session cache unavailable"


class SessionStoreUnavailable(InfrastructureError):
    """Session could not be written; no token was handed out."""

    error_code = "session_store_unavailable"
    default_message = "Could not create session"


class OperationTimeout(InfrastructureError):
    """An operation exceeded its deadline and was cancelled."""

    error_code = "timeout"
    default_message = "Operation timed out"

    def __init__(self, operation: str, timeout: float):
        super().__init__(
            f"{operation} timed out after {timeout}s",
            details={"operation": operation, "timeout": timeout},
        )
        self.operation = operation
        self.timeout = timeout


# ============================================================
# MIGRATIONS
# ============================================================

class MigrationError(RoleGateError):
    error_code = "migration_error"
    default_message = "Migration failed"


class MigrationAlreadyApplied(MigrationError):
    """Informational: the migration key already has a history record."""

    error_code = "migration_already_applied"

    def __init__(self, key: str):
        super().__init__(f"Migration '{key}' already applied", details={"key": key})
        self.key = key


class MigrationHistoryError(MigrationError):
    """The history record could not be written. Operator intervention expected."""

    error_code = "migration_history_error"

    def __init__(self, key: str):
        super().__init__(
            f"Failed to record migration history for '{key}'",
            details={"key": key},
        )
        self.key = key


class MigrationSchemaError(MigrationError):
    """Baseline schema or required indexes could not be applied."""

    error_code = "migration_schema_error"

    def __init__(self, step: str, message: Optional[str] = None):
        super().__init__(
            message or f"Schema initialization failed at step '{step}'",
            details={"step": step},
        )
        self.step = step

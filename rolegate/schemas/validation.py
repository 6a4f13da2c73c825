"""
Input validation helpers.

Limits are configurable (``ValidationSettings``), so the schemas read them
from the pydantic validation context instead of static ``Field`` bounds.

Usage:
    data = validate_input(UserCreate, limits, email=..., username=..., password=...)
"""

import re
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError, ValidationInfo

from rolegate.core.config import ValidationSettings
from rolegate.core.exceptions import InvalidInput

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def context_limits(info: ValidationInfo) -> ValidationSettings:
    """Limits passed by ``validate_input``, or the defaults."""
    if info.context and "limits" in info.context:
        return info.context["limits"]
    return ValidationSettings()


def check_length(attr: str, value: str, min_length: int, max_length: int) -> str:
    if not min_length <= len(value) <= max_length:
        raise ValueError(
            f"{attr} must have at least {min_length} and a maximum of {max_length} characters"
        )
    return value


def check_pattern(attr: str, value: str, pattern: str) -> str:
    if not re.match(pattern, value):
        raise ValueError(f"{attr} contains characters that are not allowed")
    return value


def validate_input(
    schema: type[SchemaT],
    limits: ValidationSettings | None = None,
    **data: Any,
) -> SchemaT:
    """
    Validate ``data`` against ``schema``.

    Raises InvalidInput listing each failing field. Submitted values are
    never echoed back, so passwords stay out of errors and logs.
    """
    try:
        return schema.model_validate(
            data,
            context={"limits": limits or ValidationSettings()},
        )
    except ValidationError as exc:
        errors = []
        for error in exc.errors():
            raised = error.get("ctx", {}).get("error")
            message = str(raised) if isinstance(raised, ValueError) else error["msg"]
            errors.append({
                "field": ".".join(str(part) for part in error["loc"]),
                "message": message,
            })
        raise InvalidInput(
            "; ".join(f"{e['field']}: {e['message']}" for e in errors),
            details={"errors": errors},
        ) from None

"""
Role, permission and rule input schemas.
"""

from typing import ClassVar

from pydantic import BaseModel, ValidationInfo, field_validator

from rolegate.schemas.validation import check_length, context_limits


class NameCreate(BaseModel):
    """Name length is bounded per record kind (``role``, ``permission``, ``rule``)."""
    kind: ClassVar[str]

    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str, info: ValidationInfo) -> str:
        limits = context_limits(info)
        return check_length(
            f"{cls.kind} name",
            v,
            getattr(limits, f"{cls.kind}_name_min_length"),
            getattr(limits, f"{cls.kind}_name_max_length"),
        )


class RoleCreate(NameCreate):
    kind = "role"


class PermissionCreate(NameCreate):
    kind = "permission"


class RuleCreate(NameCreate):
    kind = "rule"

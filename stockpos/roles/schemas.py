from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def _check_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Role name must not be blank")
    return v


class CreateRoleRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    permission_ids: List[str] = Field(default_factory=list)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _check_name(v)


class UpdateRoleRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _check_name(v) if v is not None else v


class AssignPermissionsRequest(BaseModel):
    """Replaces the role's whole permission set."""
    permission_ids: List[str]

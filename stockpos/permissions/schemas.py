from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from stockpos.rbac.permissions import feature_of, is_valid_permission_name


def _check_name(v: str) -> str:
    v = v.strip()
    if not is_valid_permission_name(v):
        raise ValueError(
            "Permission name must look like '<feature>.<action>' or '<feature>.*'"
        )
    return v


class CreatePermissionRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    feature: Optional[str] = Field(None, min_length=1, max_length=50)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _check_name(v)

    @model_validator(mode="after")
    def feature_matches_name(self):
        derived = feature_of(self.name)
        if self.feature is None:
            self.feature = derived
        elif self.feature.strip() != derived:
            raise ValueError(f"Feature must be '{derived}' for permission '{self.name}'")
        return self


class UpdatePermissionRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    feature: Optional[str] = Field(None, min_length=1, max_length=50)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _check_name(v) if v is not None else v

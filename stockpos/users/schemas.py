from pydantic import BaseModel, Field, EmailStr
from typing import Optional, List


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    roles: List[str] = Field(default_factory=list)
    is_active: bool = True


class UpdateUserRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    roles: Optional[List[str]] = None
    is_active: Optional[bool] = None


class AssignRolesRequest(BaseModel):
    """Replaces the user's whole role set."""
    roles: List[str]

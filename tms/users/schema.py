"""
Schema definitions for Users
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from tms.models import Role


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class UserCreateRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    full_name: str = Field(..., min_length=1, max_length=100)
    mobile_number: str = Field(..., min_length=1, max_length=15)
    password: str = Field(..., min_length=6, max_length=120)
    role: Role = Field(Role.STAFF, description="Defaults to STAFF")
    is_active: bool = True

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_means_none(cls, v):
        return _blank_to_none(v)


class UserUpdateRequest(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    mobile_number: Optional[str] = Field(None, min_length=1, max_length=15)
    password: Optional[str] = Field(None, description="Only re-hashed when supplied")
    role: Optional[Role] = None
    is_active: Optional[bool] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_means_none(cls, v):
        return _blank_to_none(v)

    @field_validator("password", mode="before")
    @classmethod
    def blank_password_means_unchanged(cls, v):
        return _blank_to_none(v)

    @field_validator("password")
    @classmethod
    def password_length(cls, v):
        if v is not None and not 6 <= len(v) <= 120:
            raise ValueError("Password must be between 6 and 120 characters")
        return v


class UserResponse(BaseModel):
    id: int
    username: str
    email: Optional[str]
    full_name: str
    mobile_number: str
    role: Role
    is_active: bool
    created_date: Optional[datetime]

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    """Compact user shape embedded in complaint and expense responses"""
    id: int
    username: str
    full_name: str
    mobile_number: str
    role: Role

    class Config:
        from_attributes = True


class UserStatsResponse(BaseModel):
    total_users: int
    total_admins: int
    total_staff: int

"""
Schema definitions for sign-in and sign-up
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from tms.models import Role


class SigninRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Login name")
    password: str = Field(..., min_length=1)
    role: Role = Field(..., description="Role the user is signing in as; must match the account")


class SignupRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=100)
    mobile_number: str = Field(..., min_length=1, max_length=15)
    password: str = Field(..., min_length=6, max_length=120)
    role: Optional[Role] = Field(None, description="Defaults to STAFF")

    @field_validator("role", mode="before")
    @classmethod
    def parse_role(cls, v):
        if isinstance(v, str):
            v = v.strip().upper()
            return v or None
        return v


class JwtResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    id: int
    username: str
    email: Optional[str]
    full_name: str
    role: Role

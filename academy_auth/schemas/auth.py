# academy_auth/schemas/auth.py
from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from academy_auth.models.user import Role


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    role: Role
    tenant_id: str = Field(min_length=1, max_length=64)
    academy_id: Optional[int] = None
    phone_number: Optional[str] = Field(default=None, max_length=30)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    tenant_id: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class AuthResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    role: str
    message: str
    user_id: int
    name: str
    email: str
    tenant_id: str
    academy_id: Optional[int] = None

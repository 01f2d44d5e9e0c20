# backend/inventorydb/apps/accounts/schemas.py

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .models import PermissionRole


# ---------------------------------------------------------------------------
# USERS
# ---------------------------------------------------------------------------


class UserRead(BaseModel):
    """Public user record. Deliberately has no password hash field."""

    id: str
    username: str
    permission_role: PermissionRole
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=8)
    permission_role: PermissionRole = PermissionRole.VIEWER


class UserRoleUpdate(BaseModel):
    permission_role: PermissionRole


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8)


# ---------------------------------------------------------------------------
# AUTH
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    username: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenPairRead(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    access_expires_at: int
    refresh_expires_at: int


class LoginResponse(TokenPairRead):
    user: UserRead

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from scolarite.core.enums import UserRole


class LoginRequest(BaseModel):
    email: str
    password: str


class UserInfo(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo
    issued_at: datetime


class CurrentUser(BaseModel):
    """Lightweight representation of the authenticated user for role checks."""

    id: str
    name: str
    role: UserRole
    email: Optional[str] = None

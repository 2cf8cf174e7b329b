"""
Authentication request and response schemas.
"""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional
from ledger_backend.app.models.enums import UserRole

PIN_PATTERN = r"^\d{6}$"


class UserRegister(BaseModel):
    """New account. Accounts are ADMIN unless STAFF is requested."""
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=5)
    pin: Optional[str] = Field(default=None, pattern=PIN_PATTERN, description="Optional 6 digit PIN")
    role: UserRole = UserRole.ADMIN


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class PinRequest(BaseModel):
    pin: str = Field(..., pattern=PIN_PATTERN, description="Exactly 6 digits")


class TokenResponse(BaseModel):
    """Bearer token plus who it belongs to (register and login)."""
    access_token: str
    token_type: str = "bearer"
    user_id: int
    username: str
    email: str
    role: UserRole


class UserResponse(BaseModel):
    id: int
    email: str
    username: str
    role: UserRole
    is_active: bool
    has_pin: bool = False
    created_at: datetime

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    success: bool = True
    message: str

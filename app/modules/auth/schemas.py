from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from uuid import UUID

from app.common.schemas import CamelModel
from app.modules.auth.models import UserRole


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    full_name: str = Field(..., min_length=2, max_length=200)
    tenant_name: Optional[str] = Field(None, max_length=200)

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v):
        if not v.strip():
            raise ValueError('El nombre completo es requerido')
        return v.strip()


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(CamelModel):
    id: UUID
    tenant_id: UUID
    full_name: str
    email: str
    role: UserRole
    is_active: bool


class AuthResponse(CamelModel):
    token: str
    user: UserOut


class AuthContext(BaseModel):
    """Identidad extraída del bearer token."""
    user_id: UUID
    tenant_id: UUID
    role: UserRole

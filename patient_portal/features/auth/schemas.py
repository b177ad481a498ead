# Authentication Feature - Schemas

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from patient_portal.shared.schemas import CamelModel


# ============== User ==============

class User(CamelModel):
    """User as returned by the API."""
    id: int
    email: str
    name: str
    role: Literal["user", "admin"] = "user"
    created_at: Optional[datetime] = None


# ============== Requests ==============

class LoginRequest(BaseModel):
    """Login request schema."""
    
    email: str
    password: str
    
    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Email is required")
        return v
    
    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class RegisterRequest(BaseModel):
    """Registration request schema."""
    
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)
    role: Optional[Literal["user", "admin"]] = None


# ============== Responses ==============

class AuthResponse(BaseModel):
    """Login/register response schema."""
    
    token: str = Field(..., min_length=1)
    user: User


class ProfileResponse(BaseModel):
    """Current user profile response."""
    
    user: User


class UserListResponse(BaseModel):
    """All users (admin only)."""
    
    users: List[User]

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional
from datetime import datetime


class SignupRequest(BaseModel):
    """Request model for password signup"""
    email: EmailStr = Field(..., description="Login email, unique per user")
    password: str = Field(..., min_length=6, description="Plain-text password, hashed before storage")
    first_name: Optional[str] = Field(None, description="Given name")
    last_name: Optional[str] = Field(None, description="Family name")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "traveler@example.com",
                "password": "s3cret-pass",
                "first_name": "Ana",
                "last_name": "Lopez",
            }
        }
    )


class LoginRequest(BaseModel):
    """Request model for password login"""
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Public view of a user; never includes the password hash"""
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    """Response model for signup and login"""
    user: UserResponse
    token: str = Field(..., description="Bearer token to send as 'Authorization: Bearer <token>'")


class MeResponse(BaseModel):
    user: UserResponse

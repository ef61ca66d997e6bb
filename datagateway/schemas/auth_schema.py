"""
Schemas for authentication endpoints
"""
from typing import Optional
from pydantic import Field

from datagateway.schemas.base import ApiModel


class AuthedUser(ApiModel):
    id: str
    username: str


class RegisterRequest(ApiModel):
    username: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=6)
    email: Optional[str] = None
    full_name: Optional[str] = None


class LoginRequest(ApiModel):
    username: str
    password: str


class TokenResponse(ApiModel):
    user_id: str
    username: str
    access_token: str
    token_type: str = "bearer"

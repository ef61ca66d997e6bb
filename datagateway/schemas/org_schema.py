"""
Schemas for organization and membership endpoints
"""
from datetime import datetime
from typing import Optional
from pydantic import Field

from datagateway.schemas.base import ApiModel


class OrganizationCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=120)
    slug: str = Field(..., min_length=1, max_length=64, pattern=r"^[a-z0-9][a-z0-9-]*$")


class OrganizationResponse(ApiModel):
    id: str
    name: str
    slug: str
    created_at: datetime


class AddMemberRequest(ApiModel):
    username: Optional[str] = None
    role: str = Field(default="member", pattern=r"^(admin|member)$")


class MemberResponse(ApiModel):
    organization_id: str
    user_id: str
    role: str
    username: Optional[str] = None

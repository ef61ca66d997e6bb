"""
Organization and membership endpoints
"""
import uuid
import logging
from typing import List
from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from datagateway.core.auth import get_current_user
from datagateway.core.database import get_db
from datagateway.core.errors import AuthorizationError, NotFoundError, ValidationError
from datagateway.dependencies.tenant import require_tenant, role_check
from datagateway.dtos import TenantContext
from datagateway.models import Organization, OrganizationMember, OrgRole, User
from datagateway.schemas import (
    AuthedUser,
    OrganizationCreate,
    OrganizationResponse,
    AddMemberRequest,
    MemberResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/organizations", tags=["Organizations"])


@router.post("", response_model=OrganizationResponse, status_code=201)
def create_organization(
    p: OrganizationCreate,
    user: AuthedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create an organization; the caller becomes its owner"""
    if Organization.get_by_slug(db, p.slug):
        raise ValidationError("Organization slug already exists")

    org = Organization.create(db, id=str(uuid.uuid4()), name=p.name, slug=p.slug)
    OrganizationMember.create(db, organization_id=org.id, user_id=user.id, role=OrgRole.OWNER.value)

    logger.info(f"User {user.id} created organization {org.id} ({org.slug})")
    return org


@router.get("/{org_id}", response_model=OrganizationResponse)
def get_organization(
    ctx: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db)
):
    org = Organization.get_by_id(db, ctx.organization_id)
    if not org:
        raise NotFoundError("Organization not found")
    return org


@router.get("/{org_id}/members", response_model=List[MemberResponse])
def list_members(
    ctx: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db)
):
    members = []
    for link in OrganizationMember.list_by_org(db, ctx.organization_id):
        user = User.get_by_id(db, link.user_id)
        members.append(MemberResponse(
            organization_id=link.organization_id,
            user_id=link.user_id,
            role=link.role,
            username=user.username if user else None,
        ))
    return members


@router.post("/{org_id}/members", response_model=MemberResponse, status_code=201)
def add_member(
    p: AddMemberRequest,
    ctx: TenantContext = Depends(role_check(OrgRole.OWNER, OrgRole.ADMIN)),
    db: Session = Depends(get_db)
):
    """Add an existing user to the organization (owner/admin only)"""
    if not p.username:
        raise ValidationError("Username is required")

    user = User.get_by_username(db, p.username)
    if not user:
        raise NotFoundError("User not found")

    if OrganizationMember.get_member(db, ctx.organization_id, user.id):
        raise ValidationError("User is already a member of this organization")

    link = OrganizationMember.create(db, organization_id=ctx.organization_id, user_id=user.id, role=p.role)
    logger.info(f"User {ctx.caller_user_id} added {user.id} to org {ctx.organization_id} as {p.role}")

    return MemberResponse(
        organization_id=link.organization_id,
        user_id=link.user_id,
        role=link.role,
        username=user.username,
    )


@router.delete("/{org_id}/members/{user_id}", status_code=204)
def remove_member(
    user_id: str,
    ctx: TenantContext = Depends(role_check(OrgRole.OWNER, OrgRole.ADMIN)),
    db: Session = Depends(get_db)
):
    """Remove a member; the owner cannot be removed and admins cannot remove admins"""
    member = OrganizationMember.get_member(db, ctx.organization_id, user_id)
    if not member:
        raise NotFoundError("Member not found")

    if member.role == OrgRole.OWNER.value:
        raise AuthorizationError("Cannot remove the organization owner")

    if ctx.caller_role == OrgRole.ADMIN.value and member.role == OrgRole.ADMIN.value:
        raise AuthorizationError("Admins cannot remove other admins")

    member.delete(db)
    return Response(status_code=204)

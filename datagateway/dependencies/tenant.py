"""
Tenant isolation guard.

    Unauthenticated -> Authenticated -> TenantResolved -> Authorized
                                                      `-> Denied

get_current_user covers the first transition (401). tenant_guard resolves
the organization id from the request (body, then query string, then path)
and looks up the caller's membership. A membership is both necessary and
sufficient for Authorized; the outcome is returned as a TenantContext that
handlers pass explicitly into every gateway call. When the request carries
no organization id the guard yields None and the request is
organization-agnostic.
"""
import json
import logging
from typing import Optional

from fastapi import Depends, Request
from sqlmodel import Session

from datagateway.core.auth import get_current_user
from datagateway.core.database import get_db
from datagateway.core.errors import AuthorizationError, ValidationError
from datagateway.dtos import TenantContext
from datagateway.models import OrganizationMember
from datagateway.schemas import AuthedUser

logger = logging.getLogger(__name__)

ORG_ID_FIELD = "organizationId"
ORG_ID_PATH_PARAM = "org_id"


async def organization_id_from_request(request: Request) -> Optional[str]:
    """Organization id from body, query string or path parameter, in that order"""
    raw_body = await request.body()
    if raw_body:
        try:
            body = json.loads(raw_body)
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get(ORG_ID_FIELD):
            return str(body[ORG_ID_FIELD])

    from_query = request.query_params.get(ORG_ID_FIELD)
    if from_query:
        return from_query

    from_path = request.path_params.get(ORG_ID_PATH_PARAM)
    if from_path:
        return str(from_path)

    return None


async def tenant_guard(
    request: Request,
    user: AuthedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Optional[TenantContext]:
    """
    Authorize the caller for the organization named by the request.

    Raises:
        AuthorizationError: caller is not a member of that organization, or the
            body/query organization differs from the one in the URL path
    """
    organization_id = await organization_id_from_request(request)
    if organization_id is None:
        return None

    path_org = request.path_params.get(ORG_ID_PATH_PARAM)
    if path_org is not None and str(path_org) != organization_id:
        logger.warning(
            f"Organization mismatch for user {user.id}: path={path_org} request={organization_id}"
        )
        raise AuthorizationError("Organization in request does not match the URL")

    membership = OrganizationMember.get_member(db, organization_id, user.id)
    if not membership:
        logger.warning(f"Denied user {user.id} access to organization {organization_id}")
        raise AuthorizationError("You don't have access to this organization's data")

    return TenantContext(
        organization_id=organization_id,
        caller_user_id=user.id,
        caller_role=membership.role,
    )


async def require_tenant(ctx: Optional[TenantContext] = Depends(tenant_guard)) -> TenantContext:
    """Authorized context or 400; for routes that always act on one organization"""
    if ctx is None:
        raise ValidationError("Organization context is required")
    return ctx


def role_check(*required_roles: str):
    """
    Dependency factory restricting an Authorized context to the given roles.

    Usage:
        @router.delete("/{data_source_id}")
        def delete(ctx: TenantContext = Depends(role_check("owner", "admin"))):
            ...
    """
    roles = [getattr(r, "value", r) for r in required_roles]

    async def check(ctx: Optional[TenantContext] = Depends(tenant_guard)) -> TenantContext:
        if ctx is None:
            raise ValidationError("Organization context is required")
        if not ctx.has_role(roles):
            raise AuthorizationError(
                f"This action requires one of the following roles: {', '.join(roles)}"
            )
        return ctx

    return check

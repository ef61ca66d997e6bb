"""
Tenant context DTO
"""
from typing import Iterable
from pydantic import BaseModel, ConfigDict


class TenantContext(BaseModel):
    """
    Outcome of the tenant isolation guard for one request.

    Only the guard builds it, after a membership lookup succeeded. It is
    passed explicitly into every gateway call and never stored.
    """
    model_config = ConfigDict(frozen=True)

    organization_id: str
    caller_user_id: str
    caller_role: str  # 'owner' | 'admin' | 'member'

    def has_role(self, roles: Iterable[str]) -> bool:
        return self.caller_role in set(roles)

    def owns(self, organization_id: str) -> bool:
        return self.organization_id == organization_id

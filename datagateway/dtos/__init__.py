"""
Data Transfer Objects (DTOs) for request-scoped context
"""
from datagateway.dtos.tenant_context import TenantContext
from datagateway.dtos.connection import ConnectionConfig

__all__ = [
    "TenantContext",
    "ConnectionConfig",
]

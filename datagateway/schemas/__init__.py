from .auth_schema import AuthedUser, RegisterRequest, LoginRequest, TokenResponse
from .connector_schema import ForeignKeyRef, ColumnSchema, TableSchema, QueryResult, ConnectionResult
from .datasource_schema import (
    DataSourceCreate,
    DataSourceUpdate,
    DataSourceResponse,
    ExecuteQueryRequest,
    NlqRequest,
    NlqResponse,
)
from .org_schema import OrganizationCreate, OrganizationResponse, AddMemberRequest, MemberResponse

__all__ = [
    "AuthedUser",
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    "ForeignKeyRef",
    "ColumnSchema",
    "TableSchema",
    "QueryResult",
    "ConnectionResult",
    "DataSourceCreate",
    "DataSourceUpdate",
    "DataSourceResponse",
    "ExecuteQueryRequest",
    "NlqRequest",
    "NlqResponse",
    "OrganizationCreate",
    "OrganizationResponse",
    "AddMemberRequest",
    "MemberResponse",
]

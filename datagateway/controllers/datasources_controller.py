"""
Data source endpoints: CRUD around the gateway plus schema, execute and NL-to-SQL.

Every route is mounted twice: organization-scoped under
/api/organizations/{org_id}/datasources and legacy under /api/datasources,
where the organization comes from the body or the organizationId query
parameter. Handlers only ever use the TenantContext returned by the guard;
the data source is then re-checked against it before the gateway runs.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from datagateway.core.database import get_db
from datagateway.core.errors import DataSourceConnectionError, ValidationError
from datagateway.dependencies.tenant import require_tenant, role_check
from datagateway.dtos import TenantContext
from datagateway.models import DataSourceStatus, OrgRole
from datagateway.repositories import DataSourceRepository
from datagateway.schemas import (
    ConnectionResult,
    DataSourceCreate,
    DataSourceUpdate,
    DataSourceResponse,
    ExecuteQueryRequest,
    NlqRequest,
    NlqResponse,
    QueryResult,
    TableSchema,
)
from datagateway.services import GatewayService, NlqService, get_gateway, get_nlq_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/organizations/{org_id}/datasources", tags=["Data Sources"])
legacy_router = APIRouter(prefix="/api/datasources", tags=["Data Sources (legacy)"])

require_manager = role_check(OrgRole.OWNER, OrgRole.ADMIN)


@router.get("", response_model=List[DataSourceResponse])
@legacy_router.get("", response_model=List[DataSourceResponse])
def list_data_sources(
    ctx: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db)
):
    return DataSourceRepository(db).list_for_tenant(ctx)


@router.post("", response_model=DataSourceResponse, status_code=201)
@legacy_router.post("", response_model=DataSourceResponse, status_code=201)
def create_data_source(
    p: DataSourceCreate,
    ctx: TenantContext = Depends(require_tenant),
    gateway: GatewayService = Depends(get_gateway),
    db: Session = Depends(get_db)
):
    """
    Register a data source. The connection is tested live first and nothing
    is stored when the test fails.

    **Errors**:
    - 400: invalid payload, unsupported engine, or database unreachable
    """
    repo = DataSourceRepository(db)
    result = gateway.test_connection(ctx, repo.connection_config_from_payload(ctx, p))
    if not result.success:
        raise DataSourceConnectionError(result.error or "Connection failed")

    return repo.create(ctx, p)


@router.post("/test", response_model=ConnectionResult, response_model_exclude_none=True)
@legacy_router.post("/test", response_model=ConnectionResult, response_model_exclude_none=True)
def test_unsaved_data_source(
    p: DataSourceCreate,
    ctx: TenantContext = Depends(require_tenant),
    gateway: GatewayService = Depends(get_gateway),
    db: Session = Depends(get_db)
):
    """Test a connection config without saving it"""
    return gateway.test_connection(ctx, DataSourceRepository(db).connection_config_from_payload(ctx, p))


@router.get("/{data_source_id}", response_model=DataSourceResponse)
@legacy_router.get("/{data_source_id}", response_model=DataSourceResponse)
def get_data_source(
    data_source_id: str,
    ctx: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db)
):
    return DataSourceRepository(db).get_for_tenant(ctx, data_source_id)


@router.patch("/{data_source_id}", response_model=DataSourceResponse)
@legacy_router.patch("/{data_source_id}", response_model=DataSourceResponse)
def update_data_source(
    data_source_id: str,
    p: DataSourceUpdate,
    ctx: TenantContext = Depends(require_manager),
    gateway: GatewayService = Depends(get_gateway),
    db: Session = Depends(get_db)
):
    """Partial update (owner/admin). Connection changes are re-tested before saving."""
    repo = DataSourceRepository(db)
    data_source = repo.get_for_tenant(ctx, data_source_id)

    if repo.touches_connection(p):
        result = gateway.test_connection(ctx, repo.merged_connection_config(data_source, p))
        if not result.success:
            raise DataSourceConnectionError(result.error or "Connection failed")

    return repo.update(data_source, p)


@router.delete("/{data_source_id}", status_code=204)
@legacy_router.delete("/{data_source_id}", status_code=204)
def delete_data_source(
    data_source_id: str,
    ctx: TenantContext = Depends(require_manager),
    db: Session = Depends(get_db)
):
    """Delete a data source and its saved queries (owner/admin)"""
    repo = DataSourceRepository(db)
    repo.delete(repo.get_for_tenant(ctx, data_source_id))
    return Response(status_code=204)


@router.post("/{data_source_id}/test", response_model=ConnectionResult, response_model_exclude_none=True)
@legacy_router.post("/{data_source_id}/test", response_model=ConnectionResult, response_model_exclude_none=True)
def test_stored_data_source(
    data_source_id: str,
    ctx: TenantContext = Depends(require_tenant),
    gateway: GatewayService = Depends(get_gateway),
    db: Session = Depends(get_db)
):
    """Re-test a stored config and record whether it is reachable"""
    repo = DataSourceRepository(db)
    data_source = repo.get_for_tenant(ctx, data_source_id)

    result = gateway.test_connection(ctx, repo.connection_config(data_source))
    repo.mark_status(data_source, DataSourceStatus.ACTIVE if result.success else DataSourceStatus.UNREACHABLE)
    return result


@router.get("/{data_source_id}/schema", response_model=List[TableSchema])
@legacy_router.get("/{data_source_id}/schema", response_model=List[TableSchema])
def fetch_schema(
    data_source_id: str,
    ctx: TenantContext = Depends(require_tenant),
    gateway: GatewayService = Depends(get_gateway),
    db: Session = Depends(get_db)
):
    """
    Introspect tables, columns and keys.

    **Errors**:
    - 400: database unreachable
    - 500: a catalog query failed (no partial schema is returned)
    """
    repo = DataSourceRepository(db)
    data_source = repo.get_for_tenant(ctx, data_source_id)

    try:
        tables = gateway.fetch_schema(ctx, repo.connection_config(data_source))
    except DataSourceConnectionError:
        repo.mark_status(data_source, DataSourceStatus.UNREACHABLE)
        raise

    repo.mark_status(data_source, DataSourceStatus.ACTIVE, synced=True)
    return tables


@router.post("/{data_source_id}/execute", response_model=QueryResult, response_model_exclude_none=True)
@legacy_router.post("/{data_source_id}/execute", response_model=QueryResult, response_model_exclude_none=True)
def execute_query(
    data_source_id: str,
    p: Optional[ExecuteQueryRequest] = None,
    ctx: TenantContext = Depends(require_tenant),
    gateway: GatewayService = Depends(get_gateway),
    db: Session = Depends(get_db)
):
    """
    Run one SQL statement as-is. Engine errors come back with 200 in
    QueryResult.error so the UI can show them inline.
    """
    repo = DataSourceRepository(db)
    data_source = repo.get_for_tenant(ctx, data_source_id)

    if p is None or not p.query or not p.query.strip():
        raise ValidationError("Query is required")

    return gateway.execute_query(ctx, repo.connection_config(data_source), p.query)


@router.post("/{data_source_id}/nlq", response_model=NlqResponse)
@legacy_router.post("/{data_source_id}/nlq", response_model=NlqResponse)
def natural_language_query(
    data_source_id: str,
    p: Optional[NlqRequest] = None,
    ctx: TenantContext = Depends(require_tenant),
    gateway: GatewayService = Depends(get_gateway),
    nlq: NlqService = Depends(get_nlq_service),
    db: Session = Depends(get_db)
):
    """
    Generate SQL for a question from the live schema. The AI service only
    sees the introspected schema, never data.

    **Errors**:
    - 400: missing question
    - 502: AI service failure
    """
    repo = DataSourceRepository(db)
    data_source = repo.get_for_tenant(ctx, data_source_id)

    if p is None or not p.question or not p.question.strip():
        raise ValidationError("Question is required")

    tables = gateway.fetch_schema(ctx, repo.connection_config(data_source))
    return NlqResponse(sql=nlq.generate_sql(p.question, tables))

"""
Gateway facade: the only entry point to tenant databases.

Every operation takes the TenantContext produced by the isolation guard as
an explicit argument and refuses to run when the target config belongs to
another organization. Both checks happen before the connector is resolved
and before any network I/O.
"""
import logging
from typing import List

from fastapi import Depends

from datagateway.connectors import Connector, ConnectorRegistry, get_registry
from datagateway.core.errors import AuthorizationError
from datagateway.dtos import ConnectionConfig, TenantContext
from datagateway.schemas import ConnectionResult, QueryResult, TableSchema

logger = logging.getLogger(__name__)


class GatewayService:
    """testConnection / fetchSchema / executeQuery behind tenant checks"""

    def __init__(self, registry: ConnectorRegistry):
        self.registry = registry

    def _connector_for(self, ctx: TenantContext, config: ConnectionConfig) -> Connector:
        if config.organization_id is None or not ctx.owns(config.organization_id):
            logger.warning(
                f"Refused gateway call: org {ctx.organization_id} on config owned by {config.organization_id}"
            )
            raise AuthorizationError("Forbidden")
        return self.registry.resolve(config.engine)

    def test_connection(self, ctx: TenantContext, config: ConnectionConfig) -> ConnectionResult:
        connector = self._connector_for(ctx, config)
        logger.info(f"[test] org={ctx.organization_id} source={config.data_source_id} engine={config.engine}")
        return connector.test_connection(config)

    def fetch_schema(self, ctx: TenantContext, config: ConnectionConfig) -> List[TableSchema]:
        connector = self._connector_for(ctx, config)
        logger.info(f"[schema] org={ctx.organization_id} source={config.data_source_id} engine={config.engine}")
        return connector.fetch_schema(config)

    def execute_query(self, ctx: TenantContext, config: ConnectionConfig, sql: str) -> QueryResult:
        connector = self._connector_for(ctx, config)
        logger.info(
            f"[execute] org={ctx.organization_id} user={ctx.caller_user_id} "
            f"source={config.data_source_id} engine={config.engine}"
        )
        return connector.execute_query(config, sql)


def get_gateway(registry: ConnectorRegistry = Depends(get_registry)) -> GatewayService:
    """FastAPI dependency"""
    return GatewayService(registry)

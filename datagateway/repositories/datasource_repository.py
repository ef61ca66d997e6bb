"""
Repository for DataSource records
Every lookup is scoped by the caller's TenantContext
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import List

from pydantic import SecretStr
from sqlalchemy import delete
from sqlmodel import Session

from datagateway.core.errors import AuthorizationError, NotFoundError
from datagateway.core.security import encrypt_secret, decrypt_secret
from datagateway.dtos import ConnectionConfig, TenantContext
from datagateway.models import DataSource, DataSourceStatus, SavedQuery
from datagateway.schemas import DataSourceCreate, DataSourceUpdate

logger = logging.getLogger(__name__)

# Fields whose change requires a fresh connection test
CONNECTION_FIELDS = ("engine", "host", "port", "database_name", "username", "password", "use_tls")


class DataSourceRepository:
    """Handles DataSource data access"""

    def __init__(self, session: Session):
        self.session = session

    def list_for_tenant(self, ctx: TenantContext) -> List[DataSource]:
        return DataSource.list_by_org(self.session, ctx.organization_id)

    def get_for_tenant(self, ctx: TenantContext, data_source_id: str) -> DataSource:
        """
        Load a data source and re-check that it belongs to ctx's organization.

        Raises:
            NotFoundError: unknown id
            AuthorizationError: the record belongs to another organization
        """
        data_source = DataSource.get_by_id(self.session, data_source_id)
        if not data_source:
            raise NotFoundError("Data source not found")

        if not ctx.owns(data_source.organization_id):
            logger.warning(
                f"Cross-tenant reference: user {ctx.caller_user_id} in org {ctx.organization_id} "
                f"asked for data source {data_source_id}"
            )
            raise AuthorizationError("Forbidden")

        return data_source

    def create(self, ctx: TenantContext, payload: DataSourceCreate) -> DataSource:
        data_source = DataSource(
            id=str(uuid.uuid4()),
            organization_id=ctx.organization_id,
            creator_user_id=ctx.caller_user_id,
            name=payload.name,
            engine=payload.engine.strip().lower(),
            host=payload.host,
            port=payload.port,
            database_name=payload.database_name,
            username=payload.username,
            password_enc=encrypt_secret(payload.password) if payload.password else "",
            use_tls=payload.use_tls,
            status=DataSourceStatus.ACTIVE.value,
        )
        self.session.add(data_source)
        self.session.commit()
        self.session.refresh(data_source)

        logger.info(f"Created data source {data_source.id} ({data_source.engine}) in org {ctx.organization_id}")
        return data_source

    def update(self, data_source: DataSource, changes: DataSourceUpdate) -> DataSource:
        """Apply a partial update; fields left unset keep their value"""
        for key, value in changes.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            if key == "password":
                data_source.password_enc = encrypt_secret(value) if value else ""
            elif key == "engine":
                data_source.engine = value.strip().lower()
            else:
                setattr(data_source, key, value)

        self.session.add(data_source)
        self.session.commit()
        self.session.refresh(data_source)
        return data_source

    def delete(self, data_source: DataSource) -> None:
        """Delete a data source and the saved queries that reference it"""
        self.session.execute(delete(SavedQuery).where(SavedQuery.data_source_id == data_source.id))
        self.session.delete(data_source)
        self.session.commit()
        logger.info(f"Deleted data source {data_source.id} from org {data_source.organization_id}")

    def mark_status(self, data_source: DataSource, status: DataSourceStatus, synced: bool = False) -> DataSource:
        data_source.status = status.value
        if synced:
            data_source.last_synced_at = datetime.now(timezone.utc)
        self.session.add(data_source)
        self.session.commit()
        self.session.refresh(data_source)
        return data_source

    # ------------------------------------------------------------------
    # Resolved connection configs
    # ------------------------------------------------------------------

    @staticmethod
    def connection_config(data_source: DataSource) -> ConnectionConfig:
        """Decrypt the stored credentials into a per-operation ConnectionConfig"""
        return ConnectionConfig(
            engine=data_source.engine,
            host=data_source.host,
            port=data_source.port,
            database_name=data_source.database_name,
            username=data_source.username,
            password=decrypt_secret(data_source.password_enc) if data_source.password_enc else "",
            use_tls=data_source.use_tls,
            data_source_id=data_source.id,
            organization_id=data_source.organization_id,
        )

    @staticmethod
    def connection_config_from_payload(ctx: TenantContext, payload: DataSourceCreate) -> ConnectionConfig:
        """ConnectionConfig for a config that is not stored yet"""
        return ConnectionConfig(
            engine=payload.engine.strip().lower(),
            host=payload.host,
            port=payload.port,
            database_name=payload.database_name,
            username=payload.username,
            password=payload.password,
            use_tls=payload.use_tls,
            organization_id=ctx.organization_id,
        )

    @staticmethod
    def merged_connection_config(data_source: DataSource, changes: DataSourceUpdate) -> ConnectionConfig:
        """Stored config with a pending partial update applied, for re-testing before save"""
        current = DataSourceRepository.connection_config(data_source)
        updates = {
            k: (v.strip().lower() if k == "engine" else v)
            for k, v in changes.model_dump(exclude_unset=True).items()
            if k in CONNECTION_FIELDS and v is not None
        }
        # model_copy skips validation, so the secret must already be wrapped
        if "password" in updates:
            updates["password"] = SecretStr(updates["password"])
        return current.model_copy(update=updates)

    @staticmethod
    def touches_connection(changes: DataSourceUpdate) -> bool:
        set_fields = changes.model_dump(exclude_unset=True)
        return any(set_fields.get(f) is not None for f in CONNECTION_FIELDS)

"""
Data source model - how to reach one tenant-owned external database
"""
from enum import Enum
from typing import Optional, List
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field, Session, select


class DataSourceStatus(str, Enum):
    ACTIVE = "active"
    UNREACHABLE = "unreachable"


class DataSource(SQLModel, table=True):
    """
    Connection record owned by exactly one organization.

    The password is stored Fernet-encrypted in password_enc; it is only
    decrypted into a ConnectionConfig for the duration of one operation.
    engine is kept as free text so rows written for engines that are no
    longer registered still load and fail with UnsupportedEngineError.
    """
    __tablename__ = "data_sources"

    id: Optional[str] = Field(default=None, primary_key=True)
    organization_id: str = Field(foreign_key="organizations.id", index=True)
    creator_user_id: str = Field(foreign_key="users.id")
    name: str
    engine: str  # 'postgresql' | 'mysql' | 'sqlserver'
    host: str
    port: int
    database_name: str
    username: str
    password_enc: str  # Fernet token, "" when no password was given
    use_tls: bool = Field(default=False)
    status: str = Field(default=DataSourceStatus.ACTIVE.value)
    last_synced_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def get_by_id(cls, db: Session, data_source_id: str) -> Optional["DataSource"]:
        return db.get(cls, data_source_id)

    @classmethod
    def list_by_org(cls, db: Session, organization_id: str) -> List["DataSource"]:
        return db.exec(
            select(cls)
            .where(cls.organization_id == organization_id)
            .order_by(cls.created_at)
        ).all()

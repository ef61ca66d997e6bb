"""
Organization model - the unit of tenancy
"""
from typing import Optional
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field, Session, select


class Organization(SQLModel, table=True):
    """
    Tenant. Every data source, saved query and membership belongs to exactly
    one organization.
    """
    __tablename__ = "organizations"

    id: Optional[str] = Field(default=None, primary_key=True)
    name: str
    slug: str = Field(unique=True, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def get_by_id(cls, db: Session, org_id: str) -> Optional["Organization"]:
        return db.get(cls, org_id)

    @classmethod
    def get_by_slug(cls, db: Session, slug: str) -> Optional["Organization"]:
        return db.exec(select(cls).where(cls.slug == slug)).first()

    @classmethod
    def create(cls, db: Session, **org_data) -> "Organization":
        db_org = cls(**org_data)
        db.add(db_org)
        db.commit()
        db.refresh(db_org)
        return db_org

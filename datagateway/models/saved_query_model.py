"""
Saved query model. Only the columns needed for ownership checks and for the
cascade on data source deletion live here.
"""
from typing import Optional
from datetime import datetime, timezone
from sqlalchemy import Column, Text
from sqlmodel import SQLModel, Field


class SavedQuery(SQLModel, table=True):
    __tablename__ = "saved_queries"

    id: Optional[str] = Field(default=None, primary_key=True)
    organization_id: str = Field(foreign_key="organizations.id", index=True)
    data_source_id: str = Field(foreign_key="data_sources.id", index=True)
    user_id: str = Field(foreign_key="users.id")
    name: str
    query: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

"""
User model
"""
from typing import Optional
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field, Session, select


class User(SQLModel, table=True):
    """
    Platform user. Tenancy lives in OrganizationMember, never on the user row.
    """
    __tablename__ = "users"

    id: Optional[str] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True)
    email: Optional[str] = None
    full_name: Optional[str] = None
    password_hash: str
    status: str = Field(default="active")  # 'active' | 'inactive'
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def get_by_id(cls, db: Session, user_id: str) -> Optional["User"]:
        return db.get(cls, user_id)

    @classmethod
    def get_by_username(cls, db: Session, username: str) -> Optional["User"]:
        return db.exec(select(cls).where(cls.username == username)).first()

    @classmethod
    def create(cls, db: Session, **user_data) -> "User":
        db_user = cls(**user_data)
        db.add(db_user)
        db.commit()
        db.refresh(db_user)
        return db_user

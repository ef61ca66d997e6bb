"""
Organization membership model
"""
from enum import Enum
from typing import Optional, List
from sqlmodel import SQLModel, Field, Session, select


class OrgRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class OrganizationMember(SQLModel, table=True):
    """
    Junction table: User <-> Organization.

    The existence of a row is what authorizes a user to touch anything owned
    by the organization; role_in_org narrows it further.
    """
    __tablename__ = "organization_members"

    organization_id: str = Field(foreign_key="organizations.id", primary_key=True)
    user_id: str = Field(foreign_key="users.id", primary_key=True)
    role: str = Field(default=OrgRole.MEMBER.value)

    @classmethod
    def get_member(cls, db: Session, organization_id: str, user_id: str) -> Optional["OrganizationMember"]:
        """Membership of user_id in organization_id, if any"""
        return db.exec(
            select(cls).where(
                cls.organization_id == organization_id,
                cls.user_id == user_id
            )
        ).first()

    @classmethod
    def create(cls, db: Session, organization_id: str, user_id: str, role: str = OrgRole.MEMBER.value) -> "OrganizationMember":
        db_member = cls(organization_id=organization_id, user_id=user_id, role=role)
        db.add(db_member)
        db.commit()
        db.refresh(db_member)
        return db_member

    def delete(self, db: Session) -> bool:
        db.delete(self)
        db.commit()
        return True

    @classmethod
    def list_by_org(cls, db: Session, organization_id: str) -> List["OrganizationMember"]:
        return db.exec(select(cls).where(cls.organization_id == organization_id)).all()

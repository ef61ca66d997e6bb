"""
Models - platform metadata store
"""
from datagateway.models.user_model import User
from datagateway.models.organization_model import Organization
from datagateway.models.member_model import OrganizationMember, OrgRole
from datagateway.models.datasource_model import DataSource, DataSourceStatus
from datagateway.models.saved_query_model import SavedQuery

__all__ = [
    "User",
    "Organization",
    "OrganizationMember",
    "OrgRole",
    "DataSource",
    "DataSourceStatus",
    "SavedQuery",
]

"""
Schemas (DTOs) for data source endpoints.
"""
from datetime import datetime
from typing import Any, Optional
from pydantic import Field, model_validator

from datagateway.schemas.base import ApiModel


class DataSourceCreate(ApiModel):
    """Request to register a new data source (tested before it is saved)"""
    name: str = Field(..., min_length=1, max_length=120)
    engine: str = Field(..., min_length=1, description="postgresql | mysql | sqlserver")
    host: str = Field(..., min_length=1)
    port: int = Field(..., gt=0, lt=65536)
    database_name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: str = ""
    use_tls: bool = False


class DataSourceUpdate(ApiModel):
    """Partial update; omitted fields keep their stored value"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    engine: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = Field(default=None, gt=0, lt=65536)
    database_name: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: Optional[bool] = None


class DataSourceResponse(ApiModel):
    """Stored config as returned to clients; the password never leaves the server"""
    id: str
    organization_id: str
    creator_user_id: str
    name: str
    engine: str
    host: str
    port: int
    database_name: str
    username: str
    use_tls: bool
    status: str
    last_synced_at: Optional[datetime] = None
    created_at: datetime
    has_password: bool = False

    @model_validator(mode="before")
    @classmethod
    def _derive_has_password(cls, data: Any) -> Any:
        # records carry password_enc, which is empty when no password was given
        if isinstance(data, dict) and "password_enc" in data:
            data = {**data, "has_password": bool(data["password_enc"])}
        return data


class ExecuteQueryRequest(ApiModel):
    query: Optional[str] = None


class NlqRequest(ApiModel):
    question: Optional[str] = None


class NlqResponse(ApiModel):
    sql: str

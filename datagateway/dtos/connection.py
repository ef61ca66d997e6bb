"""
Resolved connection parameters handed to a connector
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, SecretStr


class ConnectionConfig(BaseModel):
    """
    Everything a connector needs to reach one external database.

    Built per operation from a stored DataSource (password decrypted) or
    from an unsaved create/test request. SecretStr keeps the password out of
    reprs and logs.
    """
    model_config = ConfigDict(frozen=True)

    engine: str
    host: str
    port: int
    database_name: str
    username: str
    password: SecretStr = SecretStr("")
    use_tls: bool = False

    # Only set when built from a stored record
    data_source_id: Optional[str] = None
    organization_id: Optional[str] = None

    def describe(self) -> str:
        """Credential-free label for log lines"""
        return f"{self.engine}://{self.username}@{self.host}:{self.port}/{self.database_name}"

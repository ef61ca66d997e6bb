"""
Connector Registry

Maps an engine identifier to its connector. The default table is built once
at import from the Engine enum; building fails if an engine has no
connector, so adding an engine means adding one Connector subclass and one
entry below.
"""
import logging
from typing import Dict, Iterable, List

from datagateway.core.errors import UnsupportedEngineError
from datagateway.connectors.base import Connector, Engine
from datagateway.connectors.mysql import MySqlConnector
from datagateway.connectors.postgres import PostgresConnector
from datagateway.connectors.sqlserver import SqlServerConnector

logger = logging.getLogger(__name__)


class ConnectorRegistry:
    """Lookup table engine identifier -> Connector"""

    def __init__(self, connectors: Iterable[Connector]):
        self._connectors: Dict[str, Connector] = {}
        for connector in connectors:
            key = Engine(connector.engine).value
            if key in self._connectors:
                raise RuntimeError(f"Duplicate connector for engine '{key}'")
            self._connectors[key] = connector

    def resolve(self, engine: str) -> Connector:
        """
        Raises:
            UnsupportedEngineError: unknown identifier; raised before any I/O
        """
        connector = self._connectors.get((engine or "").strip().lower())
        if connector is None:
            raise UnsupportedEngineError(engine)
        return connector

    def engines(self) -> List[str]:
        return sorted(self._connectors)


def build_default_registry() -> ConnectorRegistry:
    registry = ConnectorRegistry([
        PostgresConnector(),
        MySqlConnector(),
        SqlServerConnector(),
    ])
    missing = {e.value for e in Engine} - set(registry.engines())
    if missing:
        raise RuntimeError(f"No connector registered for engine(s): {sorted(missing)}")
    return registry


_registry = build_default_registry()


def get_registry() -> ConnectorRegistry:
    """FastAPI dependency returning the process-wide registry"""
    return _registry

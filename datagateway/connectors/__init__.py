"""
External data source connectors (registry, lifecycle, per-engine implementations)
"""
from datagateway.connectors.base import Connector, Engine
from datagateway.connectors.registry import ConnectorRegistry, get_registry

__all__ = [
    "Connector",
    "Engine",
    "ConnectorRegistry",
    "get_registry",
]

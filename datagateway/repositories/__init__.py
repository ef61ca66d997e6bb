"""
Repository layer for data access
"""
from datagateway.repositories.datasource_repository import DataSourceRepository

__all__ = [
    "DataSourceRepository",
]

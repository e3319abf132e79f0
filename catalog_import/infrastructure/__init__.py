"""
Infrastructure package for the catalog importer.

Centralizes database concerns (connection factory, the catalog store).
Keep this layer focused on I/O, decoupled from decoding and orchestration.
"""

from catalog_import.infrastructure.db_factory import build_dsn, get_sync_connection
from catalog_import.infrastructure.store import (
    CatalogSink,
    CatalogStats,
    PostgresCatalogStore,
)

__all__ = [
    "CatalogSink",
    "CatalogStats",
    "PostgresCatalogStore",
    "build_dsn",
    "get_sync_connection",
]

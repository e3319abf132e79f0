"""
Domain package for the catalog importer.

Exports the record models produced by the decoders and written by the store.
Keep this package focused on data definitions and validation concerns.
"""

from catalog_import.domain.models import CategoryRecord, PositionRecord

__all__ = [
    "CategoryRecord",
    "PositionRecord",
]

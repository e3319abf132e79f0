"""
Legacy catalog importer.

Converts a directory of DOS-era catalog files into normalized records and
writes them to PostgreSQL:

- `.lst` files: the category hierarchy (index-keyed fields, parents by index)
- `.pos` files: priced positions (two-character field tags, multi-line texts)

Both formats are stored in code page 437.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from catalog_import.config import Settings, get_settings
from catalog_import.decoders import (
    CategoryDecoder,
    PositionDecoder,
    available_decoders,
    parse_category_file,
    parse_position_file,
    read_legacy_text,
)
from catalog_import.domain import CategoryRecord, PositionRecord
from catalog_import.errors import CatalogImportError, SourceFileError
from catalog_import.orchestrator import run_import
from catalog_import.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Records
    "CategoryRecord",
    "PositionRecord",
    # Decoding
    "CategoryDecoder",
    "PositionDecoder",
    "available_decoders",
    "parse_category_file",
    "parse_position_file",
    "read_legacy_text",
    # Errors
    "CatalogImportError",
    "SourceFileError",
    # Orchestration
    "run_import",
    # Logging
    "configure_logging",
    "get_logger",
]

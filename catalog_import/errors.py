"""
Exception types raised by the catalog importer.

Decoders never raise on malformed content; only reading a source file can
fail. `SourceFileError` is also an `OSError` so callers that only care about
I/O can keep catching that.
"""

from __future__ import annotations

from pathlib import Path


class CatalogImportError(Exception):
    """Base class for importer errors."""


class SourceFileError(CatalogImportError, OSError):
    """A legacy source file could not be opened or read."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read source file '{self.path}': {reason}")


__all__ = ["CatalogImportError", "SourceFileError"]

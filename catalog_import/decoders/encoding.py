"""
Reading legacy source files.

The catalog files were written by DOS software and use code page 437, where
for example byte 0x9A is "Ü" and 0x84 is "ä". The platform default (UTF-8)
would reject or garble those bytes, so files are always read as bytes and
decoded explicitly. cp437 assigns a character to all 256 byte values, so with
the default code page the decoding step itself cannot fail.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from catalog_import.config import get_settings
from catalog_import.errors import SourceFileError

DEFAULT_ENCODING = "cp437"


def decode_legacy_bytes(data: bytes, encoding: Optional[str] = None) -> str:
    """Decode raw file bytes with the legacy code page."""
    return data.decode(encoding or get_settings().import_source_encoding or DEFAULT_ENCODING)


def read_legacy_text(path: Path | str, encoding: Optional[str] = None) -> str:
    """
    Read a whole legacy file and return its text.

    Raises
    ------
    SourceFileError
        If the file is missing, cannot be read, or does not decode with the
        configured code page.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise SourceFileError(path, exc.strerror or str(exc)) from exc
    try:
        return decode_legacy_bytes(data, encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        # only possible with a multi-byte or unknown codec configured instead of cp437
        raise SourceFileError(path, f"cannot decode: {exc}") from exc


__all__ = ["DEFAULT_ENCODING", "decode_legacy_bytes", "read_legacy_text"]

"""
Decoders package for the catalog importer.

Re-exports the decoder interfaces, the concrete decoders and a small registry
so downstream code can pick a decoder by name or by file extension.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional

from catalog_import.decoders.abstract import AbstractCatalogDecoder, CatalogDecoder
from catalog_import.decoders.categories import CategoryDecoder, parse_category_file
from catalog_import.decoders.encoding import decode_legacy_bytes, read_legacy_text
from catalog_import.decoders.positions import PositionDecoder, parse_position_file


def _decoder_factories() -> Dict[str, Callable[[], CatalogDecoder]]:
    """Registry of available decoders."""
    return {
        "categories": lambda: CategoryDecoder(),
        "positions": lambda: PositionDecoder(),
    }


def available_decoders() -> List[str]:
    """List available decoder names."""
    return sorted(_decoder_factories().keys())


def resolve_decoder(name: str) -> CatalogDecoder:
    factories = _decoder_factories()
    if name not in factories:
        raise ValueError(f"Unknown decoder '{name}'. Available: {', '.join(factories)}")
    return factories[name]()


def decoder_for_path(path: Path | str) -> Optional[CatalogDecoder]:
    """Decoder whose extension matches the file name (case-insensitive), if any."""
    suffix = Path(path).suffix.lower()
    for factory in _decoder_factories().values():
        decoder = factory()
        if decoder.extension == suffix:
            return decoder
    return None


__all__ = [
    # Abstracts
    "AbstractCatalogDecoder",
    "CatalogDecoder",
    # Concrete decoders
    "CategoryDecoder",
    "PositionDecoder",
    # Functions
    "available_decoders",
    "decode_legacy_bytes",
    "decoder_for_path",
    "parse_category_file",
    "parse_position_file",
    "read_legacy_text",
    "resolve_decoder",
]

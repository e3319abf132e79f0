"""
Decoder for `.lst` category hierarchy files.

Each line assigns one field of one category:

    000G = 5A1C...     source GUID
    000N = Dach        display name
    001P = 000         parent, given as the index of another category

Consecutive lines with the same 3-digit index make up one category. Parents
are referenced by index, so they can only be turned into GUIDs once the whole
file has been read.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

from catalog_import.decoders.abstract import AbstractCatalogDecoder
from catalog_import.domain.models import CategoryRecord

# Any letter is accepted; only G, N and P carry meaning (E is seen in real files).
LINE_PATTERN = re.compile(r"^(\d{3})([A-Z])\s*=\s*(.*)$")
_LEADING_DIGITS = re.compile(r"^\d+")


@dataclass
class _Draft:
    sort_order: int
    source_guid: Optional[str] = None
    name: Optional[str] = None
    parent_index: Optional[int] = None


def _parse_parent_index(value: str) -> Optional[int]:
    match = _LEADING_DIGITS.match(value)
    return int(match.group()) if match else None


def _iter_drafts(lines: Iterable[str]) -> Iterator[_Draft]:
    """First pass: group lines by index, yield drafts that have a name."""
    current_index: Optional[str] = None
    draft: Optional[_Draft] = None

    for line in lines:
        match = LINE_PATTERN.match(line.strip())
        if not match:
            continue
        index, field, value = match.groups()
        value = value.strip()

        if index != current_index:
            if draft is not None and draft.name:
                yield draft
            current_index = index
            draft = _Draft(sort_order=int(index))

        if field == "G":
            draft.source_guid = value
        elif field == "N":
            draft.name = value
        elif field == "P":
            draft.parent_index = _parse_parent_index(value)

    if draft is not None and draft.name:
        yield draft


def _resolve_parents(drafts: List[_Draft], source_file: str) -> List[CategoryRecord]:
    """Second pass: turn parent indices into parent GUIDs."""
    guid_by_index: Dict[int, str] = {
        d.sort_order: d.source_guid for d in drafts if d.source_guid
    }
    return [
        CategoryRecord(
            sort_order=d.sort_order,
            source_guid=d.source_guid or None,
            name=d.name,
            parent_guid=guid_by_index.get(d.parent_index) if d.parent_index is not None else None,
            source_file=source_file,
        )
        for d in drafts
    ]


def parse_category_file(text: str, source_file: str) -> List[CategoryRecord]:
    """
    Decode the text of a `.lst` file into category records.

    Lines that do not match the `III T = value` grammar are skipped, records
    without a name are dropped and parent indices that point nowhere leave
    `parent_guid` unset. Nothing here raises on bad data.
    """
    drafts = list(_iter_drafts(text.split("\n")))
    return _resolve_parents(drafts, source_file)


class CategoryDecoder(AbstractCatalogDecoder):
    """Decodes category hierarchy files (`.lst`)."""

    name: str = "categories"
    extension: str = ".lst"

    def decode(self, text: str, source_file: str) -> List[CategoryRecord]:
        return parse_category_file(text, source_file)


__all__ = ["CategoryDecoder", "LINE_PATTERN", "parse_category_file"]

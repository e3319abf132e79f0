"""
Domain models for the catalog importer.

Defines the two normalized record shapes produced by the decoders. Both are
frozen: a decode call hands out fresh, immutable records and never touches
them again. `to_row()` maps a record onto the columns of `infrastructure/schema.sql`.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class CategoryRecord(BaseModel):
    """
    One node of the category hierarchy from a `.lst` file.
    """

    sort_order: int = Field(..., description="3-digit positional index from the source file.")
    source_guid: Optional[str] = Field(None, description="Identifier from the source system.")
    name: str = Field(..., min_length=1, description="Display name.")
    parent_guid: Optional[str] = Field(None, description="source_guid of the parent category.")
    source_file: str = Field(..., description="Originating file name.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    def to_row(self) -> Dict[str, Any]:
        return {
            "source_guid": self.source_guid,
            "name": self.name,
            "parent_guid": self.parent_guid,
            "source_file": self.source_file,
            "sort_order": self.sort_order,
        }


class PositionRecord(BaseModel):
    """
    One priced catalog item from a `.pos` file.
    """

    name: str = Field(..., min_length=1, description="Short identifying label.")
    short_text: Optional[str] = None
    long_text: Optional[str] = None
    description: Optional[str] = None
    unit: Optional[str] = Field(None, description="Human-readable unit of measure.")
    unit_code: Optional[str] = Field(None, description="Coded unit of measure.")
    category_guid: Optional[str] = Field(None, description="source_guid of a CategoryRecord.")
    source_id: Optional[str] = None
    price_value1: Optional[Decimal] = None
    price_value2: Optional[Decimal] = None
    source_file: str = Field(..., description="Originating file name.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    def to_row(self) -> Dict[str, Any]:
        # Empty strings are stored as NULL; description has no column of its own.
        return {
            "source_id": self.source_id or None,
            "name": self.name,
            "short_text": self.short_text or None,
            "long_text": self.long_text or None,
            "unit": self.unit or None,
            "unit_code": self.unit_code or None,
            "category_guid": self.category_guid or None,
            "price_value1": self.price_value1,
            "price_value2": self.price_value2,
            "source_file": self.source_file,
            "raw_data": {"description": self.description},
        }


__all__ = ["CategoryRecord", "PositionRecord"]

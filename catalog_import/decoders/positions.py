"""
Decoder for `.pos` position files.

A position file is a stream of lines, some starting with a two-character tag:

    @Pdachziegel            new position, rest of line is its name
    12,5                    bare numbers right after @P are price values
    @TLangtext Zeile1       long text, continues on the following lines
    Zeile2
    @MStk                   unit, closes the open text field

The decoder is a small state machine. `Mode` says what the next untagged
line belongs to and `TRANSITIONS` says, per tag kind, which open text field
gets written to the record and which mode follows.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, FrozenSet, List, Optional

from catalog_import.decoders.abstract import AbstractCatalogDecoder
from catalog_import.domain.models import PositionRecord


class Mode(enum.Enum):
    NO_RECORD = "no_record"
    LEADING_VALUES = "leading_values"
    LONG_TEXT = "long_text"
    SHORT_TEXT = "short_text"
    DESCRIPTION = "description"
    IDLE = "idle"


class TagKind(enum.Enum):
    RECORD_START = "@P"
    LONG_TEXT = "@T"
    SHORT_TEXT = "@R"
    UNIT = "@M"
    UNIT_CODE = "@E"
    CATEGORY = "@C"
    SOURCE_ID = "@D"
    DESCRIPTION = "@B"
    META = "meta"
    ATTRIBUTE = "@A"
    UNKNOWN = "unknown"


TAGS: Dict[str, TagKind] = {
    "@P": TagKind.RECORD_START,
    "@T": TagKind.LONG_TEXT,
    "@R": TagKind.SHORT_TEXT,
    "@M": TagKind.UNIT,
    "@E": TagKind.UNIT_CODE,
    "@C": TagKind.CATEGORY,
    "@D": TagKind.SOURCE_ID,
    "@B": TagKind.DESCRIPTION,
    "@A": TagKind.ATTRIBUTE,
    # header/meta fields without a counterpart on the record
    "@K": TagKind.META,
    "@L": TagKind.META,
    "@W": TagKind.META,
    "@H": TagKind.META,
    "@Y": TagKind.META,
    "@V": TagKind.META,
}

TEXT_FIELDS: Dict[Mode, str] = {
    Mode.LONG_TEXT: "long_text",
    Mode.SHORT_TEXT: "short_text",
    Mode.DESCRIPTION: "description",
}
TEXT_MODES: FrozenSet[Mode] = frozenset(TEXT_FIELDS)


@dataclass(frozen=True)
class Transition:
    """
    Effect of one tag kind.

    flushes: open text modes whose buffer is written to the record.
    next_mode: mode after the tag; None keeps the current mode.
    value_field: record field that receives the text after the tag.
    seeds_buffer: the text after the tag is the first line of the new buffer.
    """

    flushes: FrozenSet[Mode]
    next_mode: Optional[Mode]
    value_field: Optional[str] = None
    seeds_buffer: bool = False


TRANSITIONS: Dict[TagKind, Transition] = {
    TagKind.RECORD_START: Transition(TEXT_MODES, Mode.LEADING_VALUES, value_field="name"),
    TagKind.LONG_TEXT: Transition(TEXT_MODES, Mode.LONG_TEXT, seeds_buffer=True),
    TagKind.SHORT_TEXT: Transition(TEXT_MODES, Mode.SHORT_TEXT, seeds_buffer=True),
    TagKind.UNIT: Transition(TEXT_MODES, Mode.IDLE, value_field="unit"),
    TagKind.UNIT_CODE: Transition(frozenset({Mode.LONG_TEXT}), Mode.IDLE, value_field="unit_code"),
    TagKind.CATEGORY: Transition(frozenset(), Mode.IDLE, value_field="category_guid"),
    TagKind.SOURCE_ID: Transition(frozenset(), Mode.IDLE, value_field="source_id"),
    TagKind.DESCRIPTION: Transition(frozenset({Mode.LONG_TEXT}), Mode.DESCRIPTION, seeds_buffer=True),
    TagKind.META: Transition(frozenset(), Mode.IDLE),
    # Option/material variants are not modeled: the tag line and the value line after it are dropped.
    TagKind.ATTRIBUTE: Transition(frozenset(), None),
    TagKind.UNKNOWN: Transition(frozenset(), None),
}

NUMBER_PATTERN = re.compile(r"^\d+(?:[.,]\d*)?$")
TAG_PATTERN = re.compile(r"^@[A-Z]")


def flush_target(mode: Mode, kind: Optional[TagKind]) -> Optional[str]:
    """
    Record field the open buffer is written to when `kind` arrives in `mode`.

    `kind=None` stands for end of input, which flushes any open text field.
    """
    flushes = TEXT_MODES if kind is None else TRANSITIONS[kind].flushes
    return TEXT_FIELDS[mode] if mode in flushes else None


def classify(line: str) -> Optional[TagKind]:
    """Tag kind of a line, or None for content lines."""
    kind = TAGS.get(line[:2])
    if kind is None and TAG_PATTERN.match(line):
        return TagKind.UNKNOWN
    return kind


@dataclass
class _Draft:
    fields: Dict[str, object] = field(default_factory=dict)

    def add_price(self, value: Decimal) -> None:
        if self.fields.get("price_value1") is None:
            self.fields["price_value1"] = value
        elif self.fields.get("price_value2") is None:
            self.fields["price_value2"] = value


class _PositionScanner:
    """Line-by-line scan over one file. Not reused across files."""

    def __init__(self, source_file: str) -> None:
        self.source_file = source_file
        self.mode = Mode.NO_RECORD
        self.draft: Optional[_Draft] = None
        self.buffer: List[str] = []
        self.records: List[PositionRecord] = []
        self.skip_value_line = False

    def feed(self, raw_line: str) -> None:
        line = raw_line.rstrip("\r")
        stripped = line.rstrip()
        kind = classify(stripped)

        skip_value_line, self.skip_value_line = self.skip_value_line, False

        if kind is not None:
            self._apply_tag(kind, stripped[2:].strip())
            self.skip_value_line = kind is TagKind.ATTRIBUTE
        elif skip_value_line:
            return
        elif self.mode in TEXT_MODES:
            self.buffer.append(line)
        elif self.mode is Mode.LEADING_VALUES:
            value = stripped.strip()
            if NUMBER_PATTERN.match(value):
                self.draft.add_price(Decimal(value.replace(",", ".")))

    def finish(self) -> List[PositionRecord]:
        self._flush(None)
        self._emit()
        return self.records

    def _apply_tag(self, kind: TagKind, value: str) -> None:
        if kind is TagKind.RECORD_START:
            self._flush(kind)
            self._emit()
            self.draft = _Draft()
        elif self.draft is None:
            # Nothing before the first record belongs anywhere.
            return
        else:
            self._flush(kind)

        transition = TRANSITIONS[kind]
        if transition.value_field is not None:
            self.draft.fields[transition.value_field] = value
        if transition.next_mode is not None:
            self.mode = transition.next_mode
            self.buffer = [value] if transition.seeds_buffer and value else []

    def _flush(self, kind: Optional[TagKind]) -> None:
        target = flush_target(self.mode, kind)
        if target is not None and self.draft is not None:
            self.draft.fields[target] = "\n".join(self.buffer).strip() or None

    def _emit(self) -> None:
        if self.draft is not None and self.draft.fields.get("name"):
            self.records.append(PositionRecord(source_file=self.source_file, **self.draft.fields))
        self.draft = None
        self.buffer = []
        self.mode = Mode.NO_RECORD


def parse_position_file(text: str, source_file: str) -> List[PositionRecord]:
    """
    Decode the text of a `.pos` file into position records.

    Unknown lines and tags are skipped and positions without a name are
    dropped; nothing here raises on bad data.
    """
    scanner = _PositionScanner(source_file)
    for line in text.split("\n"):
        scanner.feed(line)
    return scanner.finish()


class PositionDecoder(AbstractCatalogDecoder):
    """Decodes position files (`.pos`)."""

    name: str = "positions"
    extension: str = ".pos"

    def decode(self, text: str, source_file: str) -> List[PositionRecord]:
        return parse_position_file(text, source_file)


__all__ = [
    "Mode",
    "PositionDecoder",
    "TagKind",
    "TRANSITIONS",
    "classify",
    "flush_target",
    "parse_position_file",
]

"""
Catalog store: where decoded records end up.

`CatalogSink` is the contract the orchestrator writes through.
`PostgresCatalogStore` implements it on the two tables from `schema.sql`, shipped inside this package:

- categories are upserted keyed by `source_guid`; a GUID seen again (in the
  same or another file) is left alone instead of producing a second row.
- positions are appended, one transaction per batch, so a failing batch does
  not take the rest of the file with it.
"""

from __future__ import annotations

from importlib import resources
from typing import Any, Dict, List, Mapping, Protocol, Sequence, TypedDict, runtime_checkable

import psycopg
from psycopg import Connection
from psycopg.types.json import Jsonb

from catalog_import.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_RESOURCE = "schema.sql"

UPSERT_CATEGORIES_SQL = """
    INSERT INTO public.catalog_categories (source_guid, name, parent_guid, source_file, sort_order)
    VALUES (%(source_guid)s, %(name)s, %(parent_guid)s, %(source_file)s, %(sort_order)s)
    ON CONFLICT (source_guid) DO NOTHING
"""

INSERT_POSITIONS_SQL = """
    INSERT INTO public.catalog_positions (
        source_id, name, short_text, long_text, unit, unit_code,
        category_guid, price_value1, price_value2, source_file, raw_data
    )
    VALUES (
        %(source_id)s, %(name)s, %(short_text)s, %(long_text)s, %(unit)s, %(unit_code)s,
        %(category_guid)s, %(price_value1)s, %(price_value2)s, %(source_file)s, %(raw_data)s
    )
"""


def load_schema_sql() -> str:
    """DDL for the import tables (idempotent, safe to run on every start)."""
    return resources.files(__package__).joinpath(SCHEMA_RESOURCE).read_text(encoding="utf-8")


class CatalogStats(TypedDict):
    """Row counts of the import tables."""

    categories: int
    positions: int
    positions_by_file: Dict[str, int]


@runtime_checkable
class CatalogSink(Protocol):
    """Write side of the catalog tables as seen by the orchestrator."""

    def clear(self) -> None:
        """Remove all previously imported positions and categories."""
        ...

    def upsert_categories(self, rows: Sequence[Mapping[str, Any]]) -> int:
        """Write category rows keyed by source_guid; returns rows submitted."""
        ...

    def insert_positions(self, rows: Sequence[Mapping[str, Any]]) -> int:
        """Append one batch of position rows; returns rows written."""
        ...

    def stats(self) -> CatalogStats:
        ...


class PostgresCatalogStore:
    """
    CatalogSink backed by a psycopg connection.

    Every write commits on success and rolls back before re-raising on
    `psycopg.Error`, leaving the connection usable for the next batch.
    """

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def ensure_schema(self) -> None:
        sql = load_schema_sql()
        self._run(lambda cur: cur.execute(sql))

    def clear(self) -> None:
        def _delete(cur: psycopg.Cursor) -> None:
            cur.execute("DELETE FROM public.catalog_positions;")
            cur.execute("DELETE FROM public.catalog_categories;")

        self._run(_delete)
        log.info("[STORE] Cleared imported positions and categories")

    def upsert_categories(self, rows: Sequence[Mapping[str, Any]]) -> int:
        if not rows:
            return 0
        self._run(lambda cur: cur.executemany(UPSERT_CATEGORIES_SQL, list(rows)))
        return len(rows)

    def insert_positions(self, rows: Sequence[Mapping[str, Any]]) -> int:
        if not rows:
            return 0
        params = [{**row, "raw_data": Jsonb(row.get("raw_data"))} for row in rows]
        self._run(lambda cur: cur.executemany(INSERT_POSITIONS_SQL, params))
        return len(rows)

    def stats(self) -> CatalogStats:
        with self._conn.cursor() as cur:
            cur.execute("SELECT count(*) FROM public.catalog_categories;")
            categories = cur.fetchone()[0]
            cur.execute("SELECT count(*) FROM public.catalog_positions;")
            positions = cur.fetchone()[0]
            cur.execute(
                """
                SELECT source_file, count(*)
                FROM public.catalog_positions
                GROUP BY source_file
                ORDER BY count(*) DESC, source_file;
                """
            )
            by_file: List[tuple] = cur.fetchall()
        self._conn.rollback()
        return CatalogStats(
            categories=categories,
            positions=positions,
            positions_by_file={name: count for name, count in by_file},
        )

    def _run(self, work) -> None:
        try:
            with self._conn.cursor() as cur:
                work(cur)
            self._conn.commit()
        except psycopg.Error:
            self._conn.rollback()
            raise


__all__ = ["CatalogSink", "CatalogStats", "PostgresCatalogStore", "load_schema_sql"]

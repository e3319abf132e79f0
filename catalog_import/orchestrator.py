"""
Orchestrator for importing a directory of legacy catalog files.

Usage (example from CLI):
    from catalog_import.orchestrator import run_import

    report = run_import(source_dir="Posten", clean=True)
    print(report["totals"])

Category files (`.lst`) are imported before position files (`.pos`), one
file at a time: read, decode, write, next. A file that cannot be read or
written is reported and the run continues with the next one.

The report is saved to `results/` by default:
- `results/latest.json` (last run)
- `results/import-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, TypedDict

import psycopg

from catalog_import.config import get_settings
from catalog_import.decoders import CatalogDecoder, CategoryDecoder, PositionDecoder
from catalog_import.decoders.encoding import read_legacy_text
from catalog_import.errors import SourceFileError
from catalog_import.infrastructure.db_factory import get_sync_connection
from catalog_import.infrastructure.store import CatalogSink, CatalogStats, PostgresCatalogStore
from catalog_import.utils.logging import get_logger
from catalog_import.utils.profiler import profile_block

log = get_logger(__name__)

BACKUP_MARKER = ".bak"


class FileResult(TypedDict, total=False):
    """
    Outcome of importing one source file.

    `written` counts rows handed to the store successfully; `skipped` counts
    decoded records that could not be written (categories without a GUID).
    """

    file: str
    kind: str
    decoded: int
    written: int
    skipped: int
    failed_batches: int
    duration_seconds: float
    peak_rss_bytes: Optional[int]
    error: Optional[str]


class ImportReport(TypedDict):
    timestamp: str
    source_dir: str
    clean: bool
    dry_run: bool
    files: List[FileResult]
    totals: Dict[str, Dict[str, int]]
    stats: Optional[CatalogStats]


def discover_files(source_dir: Path | str, extension: str) -> List[str]:
    """
    Names of the files in `source_dir` with the given extension.

    Matching is case-insensitive; backup copies (any name containing ".bak")
    are left out. Sorted for a stable import order.
    """
    ext = extension.lower()
    return sorted(
        entry.name
        for entry in Path(source_dir).iterdir()
        if entry.is_file() and entry.name.lower().endswith(ext) and BACKUP_MARKER not in entry.name
    )


def _batched(rows: Sequence[Dict[str, Any]], size: int) -> Iterator[Sequence[Dict[str, Any]]]:
    for start in range(0, len(rows), size):
        yield rows[start : start + size]


def _write_categories(file_name: str, records: list, sink: CatalogSink, result: FileResult) -> None:
    rows = [r.to_row() for r in records if r.source_guid]
    result["skipped"] = len(records) - len(rows)
    if result["skipped"]:
        log.warning(
            f"[FILE] {file_name}: {result['skipped']} categories without GUID skipped",
            extra={"file": file_name, "skipped": result["skipped"]},
        )
    try:
        result["written"] = sink.upsert_categories(rows)
    except psycopg.Error as exc:
        log.exception(f"[FILE FAILED] {file_name}", extra={"file": file_name})
        result["error"] = str(exc)


def _write_positions(
    file_name: str, records: list, sink: CatalogSink, batch_size: int, result: FileResult
) -> None:
    rows = [r.to_row() for r in records]
    for batch_num, batch in enumerate(_batched(rows, batch_size), start=1):
        try:
            result["written"] += sink.insert_positions(batch)
        except psycopg.Error as exc:
            result["failed_batches"] += 1
            result["error"] = str(exc)
            log.error(
                f"[BATCH FAILED] {file_name} batch {batch_num}: {exc}",
                extra={"file": file_name, "batch": batch_num, "batch_size": len(batch)},
            )


def _import_file(
    source_dir: Path,
    file_name: str,
    decoder: CatalogDecoder,
    sink: Optional[CatalogSink],
    batch_size: int,
    encoding: Optional[str],
) -> FileResult:
    result = FileResult(
        file=file_name,
        kind=decoder.name,
        decoded=0,
        written=0,
        skipped=0,
        failed_batches=0,
        error=None,
    )
    log.info(f"[FILE START] {file_name}", extra={"file": file_name, "kind": decoder.name})

    with profile_block(file_name) as stats:
        try:
            text = read_legacy_text(source_dir / file_name, encoding)
        except SourceFileError as exc:
            log.error(f"[FILE FAILED] {exc}", extra={"file": file_name})
            result["error"] = str(exc)
        else:
            records = decoder.decode(text, file_name)
            result["decoded"] = len(records)
            if not records:
                log.warning(f"[FILE] {file_name}: no records found", extra={"file": file_name})
            elif sink is not None and decoder.name == "categories":
                _write_categories(file_name, records, sink, result)
            elif sink is not None:
                _write_positions(file_name, records, sink, batch_size, result)

    result["duration_seconds"] = round(stats.duration_seconds, 3)
    result["peak_rss_bytes"] = stats.peak_rss_bytes
    log.info(
        f"[FILE DONE] {file_name}: {result['decoded']} decoded, {result['written']} written",
        extra={
            "file": file_name,
            "decoded": result["decoded"],
            "written": result["written"],
            "duration_seconds": result["duration_seconds"],
            "peak_rss_bytes": result["peak_rss_bytes"],
        },
    )
    return result


def _import_all(
    decoder: CatalogDecoder,
    source_dir: Path | str,
    sink: Optional[CatalogSink],
    batch_size: Optional[int],
    encoding: Optional[str],
) -> List[FileResult]:
    source_dir = Path(source_dir)
    effective_batch = batch_size or get_settings().import_batch_size
    files = discover_files(source_dir, decoder.extension)
    log.info(
        f"[{decoder.name.upper()}] Found {len(files)} {decoder.extension} files",
        extra={"kind": decoder.name, "files": len(files)},
    )
    return [
        _import_file(source_dir, name, decoder, sink, effective_batch, encoding) for name in files
    ]


def import_categories(
    source_dir: Path | str,
    sink: Optional[CatalogSink],
    encoding: Optional[str] = None,
) -> List[FileResult]:
    """Import every `.lst` file; with `sink=None` files are only decoded."""
    return _import_all(CategoryDecoder(), source_dir, sink, None, encoding)


def import_positions(
    source_dir: Path | str,
    sink: Optional[CatalogSink],
    batch_size: Optional[int] = None,
    encoding: Optional[str] = None,
) -> List[FileResult]:
    """Import every `.pos` file in batches; with `sink=None` files are only decoded."""
    return _import_all(PositionDecoder(), source_dir, sink, batch_size, encoding)


def summarize(results: Sequence[FileResult]) -> Dict[str, Dict[str, int]]:
    """Aggregate per-file results by kind."""
    totals: Dict[str, Dict[str, int]] = {}
    for res in results:
        bucket = totals.setdefault(
            res["kind"], {"files": 0, "failed_files": 0, "decoded": 0, "written": 0, "skipped": 0}
        )
        bucket["files"] += 1
        bucket["failed_files"] += 1 if res.get("error") else 0
        bucket["decoded"] += res.get("decoded", 0)
        bucket["written"] += res.get("written", 0)
        bucket["skipped"] += res.get("skipped", 0)
    return totals


def _persist_report(payload: ImportReport, results_dir: Path) -> None:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"import-{timestamp}.json"

    for path in (latest_path, archive_path):
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, sort_keys=True, ensure_ascii=False)

    log.info("Report persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})


def _collect_stats(sink: CatalogSink) -> Optional[CatalogStats]:
    try:
        return sink.stats()
    except psycopg.Error:
        log.exception("[STATS FAILED] Could not read catalog statistics")
        return None


def run_import(
    source_dir: Path | str | None = None,
    sink: Optional[CatalogSink] = None,
    clean: bool = False,
    dry_run: bool = False,
    persist: bool = True,
    results_dir: Path | str | None = None,
    batch_size: Optional[int] = None,
) -> ImportReport:
    """
    Import all category and position files from a directory.

    Parameters
    ----------
    source_dir : Path | str | None
        Directory holding the `.lst`/`.pos` files. Defaults to settings.
    sink : CatalogSink | None
        Where records are written. If None (and not a dry run), a PostgreSQL
        store is opened from settings and closed afterwards.
    clean : bool
        Delete previously imported rows before importing.
    dry_run : bool
        Only read and decode; nothing is written and `clean` is ignored.
    persist : bool
        Whether to write the report to disk.
    results_dir : Path | str | None
        Directory for JSON reports. Defaults to settings.
    batch_size : int | None
        Positions per insert. Defaults to settings.

    Returns
    -------
    ImportReport
        Per-file results, totals by kind and store statistics.

    Raises
    ------
    FileNotFoundError
        If the source directory does not exist.
    """
    settings = get_settings()
    source = Path(source_dir or settings.import_source_dir)
    if not source.is_dir():
        raise FileNotFoundError(f"Source directory not found: {source}")

    log.info(f"{'=' * 60}")
    log.info(
        f"[IMPORT START] {source}",
        extra={"source_dir": str(source), "clean": clean, "dry_run": dry_run},
    )
    log.info(f"{'=' * 60}")

    conn = None
    if sink is None and not dry_run:
        conn = get_sync_connection()
        sink = PostgresCatalogStore(conn)
    target = None if dry_run else sink

    try:
        if clean and target is not None:
            target.clear()

        results: List[FileResult] = []
        results.extend(import_categories(source, target, settings.import_source_encoding))
        results.extend(
            import_positions(source, target, batch_size, settings.import_source_encoding)
        )
        stats = _collect_stats(target) if target is not None else None
    finally:
        if conn is not None:
            conn.close()

    payload = ImportReport(
        timestamp=datetime.now(timezone.utc).isoformat(),
        source_dir=str(source),
        clean=clean,
        dry_run=dry_run,
        files=results,
        totals=summarize(results),
        stats=stats,
    )

    if persist:
        _persist_report(payload, Path(results_dir or settings.import_results_dir))

    log.info(
        f"[IMPORT COMPLETE] {len(results)} files processed",
        extra={"files": len(results), "totals": payload["totals"]},
    )
    return payload


__all__ = [
    "FileResult",
    "ImportReport",
    "discover_files",
    "import_categories",
    "import_positions",
    "run_import",
    "summarize",
]

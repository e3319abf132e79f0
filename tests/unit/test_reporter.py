from __future__ import annotations

from rich.console import Console

from catalog_import.reporter import print_report


def _console() -> Console:
    return Console(record=True, width=160)


def test_print_report_lists_files_totals_and_stats():
    console = _console()
    report = {
        "source_dir": "Posten",
        "dry_run": False,
        "files": [
            {"file": "DACH.LST", "kind": "categories", "decoded": 7, "written": 7, "skipped": 0,
             "duration_seconds": 0.01, "error": None},
            {"file": "DACH.POS", "kind": "positions", "decoded": 5, "written": 2, "skipped": 0,
             "failed_batches": 1, "duration_seconds": 0.02, "error": "connection lost"},
        ],
        "totals": {
            "categories": {"files": 1, "failed_files": 0, "decoded": 7, "written": 7, "skipped": 0},
            "positions": {"files": 1, "failed_files": 1, "decoded": 5, "written": 2, "skipped": 0},
        },
        "stats": {"categories": 7, "positions": 2, "positions_by_file": {"DACH.POS": 2}},
    }

    print_report(report, console)

    text = console.export_text()
    assert "DACH.LST" in text
    assert "partial" in text
    assert "positions: 2 written / 5 decoded from 1 files (1 with errors)" in text
    assert "Categories: 7  Positions: 2" in text


def test_print_report_without_files():
    console = _console()

    print_report({"files": []}, console)

    assert "No catalog files found." in console.export_text()


def test_print_report_shows_peak_memory():
    console = _console()
    report = {
        "source_dir": "Posten",
        "files": [
            {"file": "DACH.POS", "kind": "positions", "decoded": 5, "written": 5, "skipped": 0,
             "duration_seconds": 0.02, "peak_rss_bytes": 48 * 1024 * 1024, "error": None},
            {"file": "ALT.POS", "kind": "positions", "decoded": 1, "written": 1, "skipped": 0,
             "duration_seconds": 0.01, "peak_rss_bytes": None, "error": None},
        ],
    }

    print_report(report, console)

    text = console.export_text()
    assert "Peak Memory (MB)" in text
    assert "48.00" in text
    assert "N/A" in text

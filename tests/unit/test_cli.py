from __future__ import annotations

import json
from contextlib import nullcontext
from pathlib import Path

import pytest
from typer.testing import CliRunner

from catalog_import import main
from catalog_import.main import app
from scripts.generate_sample import generate_sample

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "ERROR")


def test_parse_position_file(write_legacy):
    path = write_legacy("DACH.POS", "@PZiegel\n12,5\n@TLang\n@MStk\n")

    result = runner.invoke(app, ["parse", str(path)])

    assert result.exit_code == 0, result.output
    records = json.loads(result.stdout)
    assert records == [
        {
            "name": "Ziegel",
            "long_text": "Lang",
            "unit": "Stk",
            "price_value1": "12.5",
            "source_file": "DACH.POS",
        }
    ]


def test_parse_category_file_reads_cp437(write_legacy):
    path = write_legacy("DACH.LST", "000G=g\n000N=Zubehör\n")

    result = runner.invoke(app, ["parse", str(path)])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)[0]["name"] == "Zubehör"


def test_parse_rejects_unknown_extension(tmp_path: Path):
    path = tmp_path / "notes.txt"
    path.write_text("x")

    result = runner.invoke(app, ["parse", str(path)])

    assert result.exit_code == 2


def test_parse_missing_file(tmp_path: Path):
    result = runner.invoke(app, ["parse", str(tmp_path / "missing.pos")])

    assert result.exit_code == 1


def test_run_dry_run_json(tmp_path: Path):
    generate_sample(tmp_path / "Posten", positions=4)

    result = runner.invoke(
        app,
        ["run", "--source-dir", str(tmp_path / "Posten"), "--dry-run", "--json", "--no-persist"],
    )

    assert result.exit_code == 0, result.output
    report = json.loads(result.stdout)
    assert report["dry_run"] is True
    assert report["totals"]["positions"]["decoded"] == 4
    assert report["totals"]["categories"]["written"] == 0


def test_run_missing_directory(tmp_path: Path):
    result = runner.invoke(app, ["run", "--source-dir", str(tmp_path / "nope"), "--dry-run"])

    assert result.exit_code == 1


def test_info_shows_import_settings():
    result = runner.invoke(app, ["info"])

    assert result.exit_code == 0
    assert "encoding=cp437" in result.stdout


def test_init_db_creates_schema(monkeypatch: pytest.MonkeyPatch):
    created = []

    class _Store:
        def __init__(self, conn):
            self.conn = conn

        def ensure_schema(self):
            created.append(self.conn)

    monkeypatch.setattr(main, "get_sync_connection", lambda: nullcontext("conn"))
    monkeypatch.setattr(main, "PostgresCatalogStore", _Store)

    result = runner.invoke(app, ["init-db"])

    assert result.exit_code == 0, result.output
    assert created == ["conn"]
    assert "schema is up to date" in result.stdout

from pathlib import Path
from time import sleep

import pytest
from pydantic import ValidationError

from catalog_import import config
from catalog_import.decoders import available_decoders, decoder_for_path, resolve_decoder
from catalog_import.decoders.abstract import CatalogDecoder
from catalog_import.domain import PositionRecord
from catalog_import.infrastructure.db_factory import build_dsn
from catalog_import.infrastructure.store import load_schema_sql
from catalog_import.utils import profiler
from scripts import generate_sample


def test_get_settings_defaults(monkeypatch: pytest.MonkeyPatch):
    for var in ["DB_HOST", "DB_PORT", "IMPORT_BATCH_SIZE", "IMPORT_SOURCE_ENCODING"]:
        monkeypatch.delenv(var, raising=False)
    settings = config.get_settings()
    assert settings.db_host == "localhost"
    assert settings.db_port == 5432
    assert settings.import_batch_size == 100
    assert settings.import_source_encoding == "cp437"
    assert settings.import_source_dir == Path("Posten")


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("IMPORT_BATCH_SIZE", "25")
    monkeypatch.setenv("DB_NAME", "lv")
    settings = config.get_settings()
    assert settings.import_batch_size == 25
    assert build_dsn(settings).endswith("/lv")


def test_unknown_source_encoding_is_rejected(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("IMPORT_SOURCE_ENCODING", "no-such-codec")
    with pytest.raises(ValidationError, match="unknown source encoding"):
        config.get_settings()


def test_source_encoding_is_normalized(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("IMPORT_SOURCE_ENCODING", "IBM437")
    assert config.get_settings().import_source_encoding == "cp437"


def test_profile_block_measures_time():
    with profiler.profile_block("sleep") as stats:
        sleep(0.05)
    assert stats.duration_seconds >= 0.05
    assert stats.peak_rss_bytes is None or stats.peak_rss_bytes > 0


def test_available_decoders():
    assert available_decoders() == ["categories", "positions"]
    assert isinstance(resolve_decoder("positions"), CatalogDecoder)
    with pytest.raises(ValueError):
        resolve_decoder("excel")


def test_decoder_for_path_ignores_case():
    assert decoder_for_path("Posten/DACH.LST").name == "categories"
    assert decoder_for_path("dach.pos").name == "positions"
    assert decoder_for_path("dach.txt") is None


def test_position_row_maps_empty_text_to_null():
    row = PositionRecord(name="Ziegel", unit="", source_file="X.POS").to_row()
    assert row["unit"] is None
    assert row["raw_data"] == {"description": None}


def test_generate_sample_writes_cp437(tmp_path: Path):
    paths = generate_sample.generate_sample(tmp_path, positions=3, seed=123)
    assert [p.name for p in paths] == ["DACH.LST", "DACH.POS", "DACH.bak.POS"]
    raw = (tmp_path / "DACH.LST").read_bytes()
    # "Gerüst" with ü as cp437 0x81
    assert b"Ger\x81st" in raw
    with pytest.raises(UnicodeDecodeError):
        raw.decode("utf-8")


def test_schema_ships_with_package():
    sql = load_schema_sql()
    assert "CREATE TABLE IF NOT EXISTS public.catalog_categories" in sql
    assert "CREATE TABLE IF NOT EXISTS public.catalog_positions" in sql
    assert "NUMERIC(" not in sql

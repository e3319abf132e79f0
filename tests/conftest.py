"""
Pytest configuration for the catalog importer.

Provides fixtures for:
- Writing legacy (code page 437) source files
- Settings cache isolation
- Database connection management for integration tests
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Generator

import psycopg
import pytest

from catalog_import.config import Settings, get_settings
from catalog_import.infrastructure.store import PostgresCatalogStore


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Drop the cached Settings so env overrides in a test take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def write_legacy(tmp_path: Path) -> Callable[[str, str], Path]:
    """
    Factory writing text as a cp437 file under tmp_path.

    Returns the path of the written file.
    """

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(text.encode("cp437"))
        return path

    return _write


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "catalog"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def clean_store(db_connection: psycopg.Connection) -> Generator[PostgresCatalogStore, None, None]:
    """
    A store on the test database with the schema in place and both tables empty.
    """
    store = PostgresCatalogStore(db_connection)
    store.ensure_schema()
    store.clear()
    yield store
    store.clear()

import os
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from fairness.config.settings import Settings
from fairness.database.connection import (
    build_conninfo,
    close_pool,
    get_connection,
    init_pool,
)

_SCHEMA_PATH = Path(__file__).resolve().parents[2] / "fairness" / "database" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "endorsements_test")
    return Settings()


def _ensure_schema(settings: Settings) -> None:
    with psycopg.connect(build_conninfo(settings), connect_timeout=3) as conn:
        conn.execute(_SCHEMA_PATH.read_text(encoding="utf-8"))
        conn.commit()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        _ensure_schema(test_settings)
        init_pool(test_settings)
    except Exception as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run these tests")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def reviewer_id(integration_pool: None) -> Generator[str, None, None]:
    """A unique reviewer id whose rows are removed after the test."""
    value = f"reviewer-{uuid.uuid4()}"
    yield value
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("DELETE FROM peer_endorsements WHERE reviewer_id = %s", (value,))
            cur.execute(
                "DELETE FROM reviewer_consistency_profiles WHERE reviewer_id = %s", (value,)
            )
        conn.commit()


@pytest.fixture
def endorsement_id(integration_pool: None) -> Generator[str, None, None]:
    """A unique endorsement id whose log entries are removed after the test."""
    value = str(uuid.uuid4())
    yield value
    with get_connection() as conn:
        conn.execute("DELETE FROM bias_reduction_logs WHERE endorsement_id = %s", (value,))
        conn.commit()

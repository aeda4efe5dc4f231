"""Pytest configuration and fixtures for genobase-importer tests."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from fixtures.records import RecordingStore  # noqa: E402

try:
    from testcontainers.postgres import PostgresContainer

    HAS_TESTCONTAINERS = True
except ImportError:
    HAS_TESTCONTAINERS = False


@pytest.fixture
def recording_store() -> RecordingStore:
    """Store that keeps every flushed batch in memory."""
    return RecordingStore()


@pytest.fixture(scope="session")
def postgres_container():
    """Create a PostgreSQL container for integration tests."""
    if not HAS_TESTCONTAINERS:
        pytest.skip("testcontainers not installed")

    postgres = PostgresContainer("postgres:15")
    try:
        postgres.start()
    except Exception as e:
        pytest.skip(f"PostgreSQL container unavailable: {e}")

    yield postgres
    postgres.stop()


@pytest.fixture
def db_url(postgres_container) -> str:
    host = postgres_container.get_container_host_ip()
    port = postgres_container.get_exposed_port(5432)
    user = postgres_container.username
    password = postgres_container.password
    database = postgres_container.dbname
    return f"postgresql://{user}:{password}@{host}:{port}/{database}"


@pytest.fixture
async def genobase_db(db_url):
    """Connection to a database with a freshly created genobase schema."""
    import asyncpg

    from genobase_importer.schema import SchemaManager

    conn = await asyncpg.connect(db_url)

    schema_manager = SchemaManager()
    await schema_manager.drop_schema(conn)
    await schema_manager.create_schema(conn)

    yield conn

    await schema_manager.drop_schema(conn)
    await conn.close()

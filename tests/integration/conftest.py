"""
Shared fixtures for PostgreSQL integration tests.

Tests are skipped when the configured database is unreachable.
"""

import asyncio
from collections.abc import Awaitable, Callable

import psycopg
import pytest

from anonfeedback.adapters.repository.postgres import Database, PostgresAccountRepository
from anonfeedback.config.settings import get_settings


@pytest.fixture(scope="session")
def database_url() -> str:
    url = get_settings().database_url
    try:
        with psycopg.connect(url, connect_timeout=2):
            pass
    except psycopg.OperationalError:
        pytest.skip("PostgreSQL is not available")
    return url


@pytest.fixture
def run_with_repository(
    database_url: str,
) -> Callable[[Callable[[PostgresAccountRepository], Awaitable[None]]], None]:
    """
    Run an async scenario against a clean accounts table.

    The pool is opened and closed inside the scenario's event loop.
    """

    def run(scenario: Callable[[PostgresAccountRepository], Awaitable[None]]) -> None:
        async def main() -> None:
            database = Database(database_url, min_size=1, max_size=10)
            pool = await database.connect()
            try:
                async with pool.connection() as conn:
                    await conn.execute("DELETE FROM accounts")
                    await conn.commit()
                await scenario(PostgresAccountRepository(pool))
            finally:
                await database.close()

        asyncio.run(main())

    return run

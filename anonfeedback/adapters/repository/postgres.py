"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL on an async connection pool.

Storage Design - Embedded Mailbox:
----------------------------------
Messages live inside the account row as a JSONB array, mirroring a
document store's embedded sub-documents:

1. **Append**: ``messages = messages || <message>`` in a single UPDATE
   guarded by ``is_accepting_messages``. Concurrent senders never lose
   each other's writes and a closed gate is honoured at write time.

2. **Retrieval**: ``jsonb_array_elements`` unwinds the array, SQL sorts
   by ``created_at`` descending, and the adapter regroups the rows.

3. **Flags**: gate and verification flags are single-statement updates
   with ``RETURNING``, so read-modify-write races cannot occur.
"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from psycopg import sql
from psycopg.errors import UniqueViolation
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from anonfeedback.domain.models import Account, Message
from anonfeedback.domain.ports import UPDATABLE_FIELDS

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = """
    id, username, email, password_hash, verify_code, verify_code_expiry,
    is_verified, is_accepting_messages, messages
"""


class Database:
    """
    Process-wide connection pool with an idempotent connect().

    connect() is safe to call on every request: the first call opens the
    pool and runs migrations, later calls return the open pool.
    """

    def __init__(self, conninfo: str, min_size: int = 2, max_size: int = 10) -> None:
        self._conninfo = conninfo
        self._min_size = min_size
        self._max_size = max_size
        self._pool: AsyncConnectionPool | None = None

    @property
    def pool(self) -> AsyncConnectionPool:
        if self._pool is None:
            raise RuntimeError("Database is not connected")
        return self._pool

    async def connect(self) -> AsyncConnectionPool:
        if self._pool is not None:
            logger.debug("Already connected to database")
            return self._pool

        pool = AsyncConnectionPool(
            conninfo=self._conninfo,
            min_size=self._min_size,
            max_size=self._max_size,
            open=False,
        )
        await pool.open()
        try:
            await run_migrations(pool)
        except Exception:
            await pool.close()
            raise

        self._pool = pool
        logger.info("Connected to database")
        return pool

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection pool closed")


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 AsyncConnectionPool for database connections
        """
        self._pool = pool

    async def find_by_handle(self, username: str) -> Account | None:
        query = f"""
            SELECT {_ACCOUNT_COLUMNS} FROM accounts
            WHERE username = %s
            ORDER BY is_verified DESC, updated_at DESC
            LIMIT 1
        """
        return await self._fetch_account(query, (username,))

    async def find_verified_by_handle(self, username: str) -> Account | None:
        query = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE username = %s AND is_verified"
        return await self._fetch_account(query, (username,))

    async def find_by_email(self, email: str) -> Account | None:
        query = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = %s"
        return await self._fetch_account(query, (email,))

    async def find_by_id(self, account_id: str) -> Account | None:
        if not _is_uuid(account_id):
            return None
        query = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE id = %s::uuid"
        return await self._fetch_account(query, (account_id,))

    async def create_account(
        self,
        username: str,
        email: str,
        password_hash: str,
        verify_code: str,
        verify_code_expiry: datetime,
    ) -> Account | None:
        """
        Insert an unverified account.

        The UNIQUE constraint on email decides concurrent sign-ups for the
        same address; the loser gets None.
        """
        query = f"""
            INSERT INTO accounts (username, email, password_hash, verify_code, verify_code_expiry)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING {_ACCOUNT_COLUMNS}
        """
        params = (username, email, password_hash, verify_code, verify_code_expiry)
        try:
            return await self._fetch_account(query, params)
        except UniqueViolation:
            logger.info("Concurrent registration lost for email %s", email)
            return None

    async def update_fields(
        self, account_id: str, fields: dict[str, Any], unverified_only: bool = False
    ) -> Account | None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        if not _is_uuid(account_id):
            return None

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder())
            for column in fields
        )
        condition = sql.SQL(" AND NOT is_verified") if unverified_only else sql.SQL("")
        query = sql.SQL(
            "UPDATE accounts SET {assignments}, updated_at = NOW() "
            "WHERE id = %s::uuid{condition} RETURNING {columns}"
        ).format(
            assignments=assignments,
            condition=condition,
            columns=sql.SQL(_ACCOUNT_COLUMNS),
        )
        return await self._fetch_account(query, (*fields.values(), account_id))

    async def append_message(self, account_id: str, message: Message) -> bool:
        if not _is_uuid(account_id):
            return False

        query = """
            UPDATE accounts
            SET messages = messages || %s, updated_at = NOW()
            WHERE id = %s::uuid AND is_accepting_messages
        """
        payload = Jsonb([_message_to_json(message)])

        async with self._pool.connection() as conn, conn.cursor() as cursor:
            await cursor.execute(query, (payload, account_id))
            await conn.commit()
            # 0 rows: account missing, or gate closed since the caller's lookup
            return cursor.rowcount == 1

    async def list_messages(self, account_id: str) -> list[Message] | None:
        if not _is_uuid(account_id):
            return None

        exists_sql = "SELECT 1 FROM accounts WHERE id = %s::uuid"
        unwind_sql = """
            SELECT elem->>'content' AS content,
                   (elem->>'created_at')::timestamptz AS created_at
            FROM accounts, jsonb_array_elements(accounts.messages) AS elem
            WHERE accounts.id = %s::uuid
            ORDER BY created_at DESC
        """

        async with self._pool.connection() as conn:
            async with conn.cursor() as cursor:
                await cursor.execute(exists_sql, (account_id,))
                if await cursor.fetchone() is None:
                    return None
            async with conn.cursor(row_factory=dict_row) as cursor:
                await cursor.execute(unwind_sql, (account_id,))
                rows = await cursor.fetchall()

        return [Message(content=row["content"], created_at=row["created_at"]) for row in rows]

    async def ping(self) -> None:
        async with self._pool.connection() as conn:
            await conn.execute("SELECT 1")

    async def _fetch_account(self, query: Any, params: tuple) -> Account | None:
        async with self._pool.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cursor:
                await cursor.execute(query, params)
                row = await cursor.fetchone()
            await conn.commit()
        return _row_to_account(row) if row is not None else None


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def _message_to_json(message: Message) -> dict[str, str]:
    return {"content": message.content, "created_at": message.created_at.isoformat()}


def _row_to_account(row: dict[str, Any]) -> Account:
    return Account(
        id=str(row["id"]),
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        verify_code=row["verify_code"],
        verify_code_expiry=row["verify_code_expiry"],
        is_verified=row["is_verified"],
        is_accepting_messages=row["is_accepting_messages"],
        messages=[
            Message(content=item["content"], created_at=datetime.fromisoformat(item["created_at"]))
            for item in row["messages"]
        ],
    )


async def run_migrations(pool: AsyncConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 AsyncConnectionPool instance
    """
    # Structure: anonfeedback/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            async with pool.connection() as conn:
                await conn.execute(sql_content)
                await conn.commit()

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e

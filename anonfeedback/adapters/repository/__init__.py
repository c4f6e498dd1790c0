"""Repository adapters - Database implementations."""

from .memory import InMemoryAccountRepository
from .postgres import Database, PostgresAccountRepository, run_migrations

__all__ = ["Database", "InMemoryAccountRepository", "PostgresAccountRepository", "run_migrations"]

"""
In-memory repository adapter - Implements AccountRepository protocol.

Used for local development (STORAGE_BACKEND=memory) and tests. Each
method runs without an await between its read and its write, so on a
single event loop every call is atomic, matching the per-statement
atomicity of the PostgreSQL adapter.
"""

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any

from anonfeedback.domain.models import Account, Message
from anonfeedback.domain.ports import UPDATABLE_FIELDS


class InMemoryAccountRepository:
    """
    Implements AccountRepository protocol with a dict of accounts.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Accounts are copied on the way in and out so callers never mutate
    stored state directly.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        # Monotonic update counter, the analogue of updated_at ordering
        self._touched: dict[str, int] = {}
        self._tick = 0

    async def find_by_handle(self, username: str) -> Account | None:
        holders = [a for a in self._accounts.values() if a.username == username]
        if not holders:
            return None
        best = max(holders, key=lambda a: (a.is_verified, self._touched[a.id]))
        return self._copy(best)

    async def find_verified_by_handle(self, username: str) -> Account | None:
        for account in self._accounts.values():
            if account.username == username and account.is_verified:
                return self._copy(account)
        return None

    async def find_by_email(self, email: str) -> Account | None:
        for account in self._accounts.values():
            if account.email == email:
                return self._copy(account)
        return None

    async def find_by_id(self, account_id: str) -> Account | None:
        account = self._accounts.get(account_id)
        return self._copy(account) if account is not None else None

    async def create_account(
        self,
        username: str,
        email: str,
        password_hash: str,
        verify_code: str,
        verify_code_expiry: datetime,
    ) -> Account | None:
        if any(a.email == email for a in self._accounts.values()):
            return None

        account = Account(
            id=str(uuid.uuid4()),
            username=username,
            email=email,
            password_hash=password_hash,
            verify_code=verify_code,
            verify_code_expiry=verify_code_expiry,
        )
        self._accounts[account.id] = account
        self._touch(account.id)
        return self._copy(account)

    async def update_fields(
        self, account_id: str, fields: dict[str, Any], unverified_only: bool = False
    ) -> Account | None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        account = self._accounts.get(account_id)
        if account is None or (unverified_only and account.is_verified):
            return None

        updated = replace(account, **fields)
        self._accounts[account_id] = updated
        self._touch(account_id)
        return self._copy(updated)

    async def append_message(self, account_id: str, message: Message) -> bool:
        account = self._accounts.get(account_id)
        if account is None or not account.is_accepting_messages:
            return False
        account.messages.append(message)
        self._touch(account_id)
        return True

    async def list_messages(self, account_id: str) -> list[Message] | None:
        account = self._accounts.get(account_id)
        if account is None:
            return None
        return sorted(account.messages, key=lambda m: m.created_at, reverse=True)

    async def ping(self) -> None:
        return None

    def _touch(self, account_id: str) -> None:
        self._tick += 1
        self._touched[account_id] = self._tick

    @staticmethod
    def _copy(account: Account) -> Account:
        return replace(account, messages=list(account.messages))

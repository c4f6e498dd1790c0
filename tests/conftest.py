"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for expiry tests
- In-memory repository and mocked email sender
- An AccountService wired to both
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from anonfeedback.adapters.repository.memory import InMemoryAccountRepository
from anonfeedback.domain.accounts import AccountService
from anonfeedback.domain.ports import EmailResult

START = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def email_sender() -> AsyncMock:
    sender = AsyncMock()
    sender.send.return_value = EmailResult(
        success=True, message="Verification email sent successfully"
    )
    return sender


@pytest.fixture
def service(
    repository: InMemoryAccountRepository, email_sender: AsyncMock, clock: FakeClock
) -> AccountService:
    # bcrypt cost 4 keeps hashing fast in tests
    return AccountService(
        repository=repository,
        email_sender=email_sender,
        code_ttl=timedelta(hours=1),
        bcrypt_cost=4,
        clock=clock,
    )

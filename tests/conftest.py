"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A fast Argon2id hasher (low cost parameters, same algorithm)
- In-memory account repository
- Recording notifier
- Lifecycle service wired from the above
- Test client for the full application on the in-memory store
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from src.adapters.repository.memory import InMemoryAccountRepository
from src.api.dependencies import get_hasher, get_notifier
from src.api.main import app
from src.domain.hashing import CredentialHasher
from src.domain.lifecycle import AccountLifecycleService


class RecordingNotifier:
    """Notifier test double that keeps every message it is asked to send."""

    def __init__(self, succeed: bool = True) -> None:
        self.succeed = succeed
        self.messages: list[tuple[str, str, str]] = []

    def send(self, to: str, subject: str, body: str) -> bool:
        self.messages.append((to, subject, body))
        return self.succeed


@pytest.fixture
def hasher() -> CredentialHasher:
    """Argon2id hasher with minimal cost so tests stay fast."""
    return CredentialHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(
    repository: InMemoryAccountRepository,
    notifier: RecordingNotifier,
    hasher: CredentialHasher,
) -> AccountLifecycleService:
    return AccountLifecycleService(repository=repository, notifier=notifier, hasher=hasher)


@pytest.fixture
def client(
    repository: InMemoryAccountRepository,
    notifier: RecordingNotifier,
    hasher: CredentialHasher,
) -> Generator[TestClient, None, None]:
    """
    Test client for the full application backed by the in-memory store.

    The lifespan is not run; the repository is placed in app.state directly.
    """
    app.state.repository = repository
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_hasher] = lambda: hasher
    yield TestClient(app)
    app.dependency_overrides.clear()

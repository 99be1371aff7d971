"""
In-memory repository adapter - Implements AccountRepository protocol.

Thread-safe dict store used for local development and tests. A single
lock makes create, the single-field transitions and the conditional reset
update atomic, mirroring the guarantees of the PostgreSQL adapter.
"""

import threading
from dataclasses import replace
from datetime import datetime, timezone

from src.domain.account import Account
from src.domain.exceptions import AccountAlreadyExists, AccountNotFound, PersistenceFailure
from src.domain.hashing import is_password_hash


class InMemoryAccountRepository:
    """
    Implements AccountRepository protocol with process-local storage.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Returns copies so callers never mutate stored records directly.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._ids_by_email: dict[str, str] = {}
        self._lock = threading.Lock()

    def get_by_id(self, account_id: str) -> Account | None:
        with self._lock:
            account = self._accounts.get(account_id)
            return replace(account) if account is not None else None

    def get_by_email(self, email: str) -> Account | None:
        with self._lock:
            account_id = self._ids_by_email.get(email)
            if account_id is None:
                return None
            return replace(self._accounts[account_id])

    def create(self, account: Account) -> Account:
        _require_hash(account)
        with self._lock:
            if account.email in self._ids_by_email:
                raise AccountAlreadyExists(account.email)
            now = datetime.now(timezone.utc)
            stored = replace(account, created_at=now, updated_at=now)
            self._accounts[stored.id] = stored
            self._ids_by_email[stored.email] = stored.id
            return replace(stored)

    def update(self, account: Account) -> Account:
        _require_hash(account)
        with self._lock:
            if account.id not in self._accounts:
                raise AccountNotFound(account.id)
            return self._write(account)

    def mark_verified(self, account_id: str) -> Account:
        with self._lock:
            current = self._accounts.get(account_id)
            if current is None:
                raise AccountNotFound(account_id)
            return self._patch(current, verified=True)

    def set_reset_code(self, account_id: str, code: str) -> Account:
        with self._lock:
            current = self._accounts.get(account_id)
            if current is None or not current.verified:
                raise AccountNotFound(account_id)
            return self._patch(current, password_reset_code=code)

    def update_if_reset_code(self, account: Account, expected_code: str) -> Account | None:
        _require_hash(account)
        with self._lock:
            current = self._accounts.get(account.id)
            if current is None or current.password_reset_code != expected_code:
                return None
            return self._write(account)

    def ping(self) -> None:
        """Always reachable."""

    def count(self) -> int:
        with self._lock:
            return len(self._accounts)

    def _write(self, account: Account) -> Account:
        # email and created_at are immutable once stored
        current = self._accounts[account.id]
        stored = replace(
            account,
            email=current.email,
            verified=current.verified or account.verified,
            created_at=current.created_at,
            updated_at=datetime.now(timezone.utc),
        )
        self._accounts[account.id] = stored
        return replace(stored)

    def _patch(self, current: Account, **changes) -> Account:
        stored = replace(current, **changes, updated_at=datetime.now(timezone.utc))
        self._accounts[current.id] = stored
        return replace(stored)


def _require_hash(account: Account) -> None:
    if not is_password_hash(account.password_hash):
        raise PersistenceFailure("Refusing to persist a password that is not hashed")

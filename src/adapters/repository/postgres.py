"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Consistency Design:
-------------------
1. **Email uniqueness**: The UNIQUE constraint on ``accounts.email`` is the
   atomic guard for registration. ``INSERT ... ON CONFLICT (email) DO
   NOTHING`` returns no row when the email is taken, which maps to
   AccountAlreadyExists without overwriting the existing record.

2. **Monotonic verification**: Updates write ``verified = verified OR %s`` so
   a stale read can never flip a verified account back to unverified.

3. **Reset code compare-and-clear**: ``update_if_reset_code`` adds
   ``AND password_reset_code = %s`` to the UPDATE, so a completion that
   raced a newer reset request (or another completion) matches zero rows.

4. **Single-field transitions**: ``mark_verified`` and ``set_reset_code``
   update only their own column, so a reset request never writes back the
   password hash it read before a concurrent completion.

5. **Plaintext guard**: A CHECK constraint rejects any ``password_hash`` that
   is not an Argon2 digest, and the adapter refuses such writes up front.
"""

import logging
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg_pool import ConnectionPool

from src.domain.account import Account
from src.domain.exceptions import AccountAlreadyExists, AccountNotFound, PersistenceFailure
from src.domain.hashing import is_password_hash

logger = logging.getLogger(__name__)

_COLUMNS = """
    id, email, first_name, last_name, password_hash, verification_code,
    password_reset_code, verified, created_at, updated_at
"""


def _row_to_account(row: tuple) -> Account:
    return Account(
        id=row[0],
        email=row[1],
        first_name=row[2],
        last_name=row[3],
        password_hash=row[4],
        verification_code=row[5],
        password_reset_code=row[6],
        verified=row[7],
        created_at=row[8],
        updated_at=row[9],
    )


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def get_by_id(self, account_id: str) -> Account | None:
        sql = f"SELECT {_COLUMNS} FROM accounts WHERE id = %s"
        return self._fetch_one(sql, (account_id,))

    def get_by_email(self, email: str) -> Account | None:
        sql = f"SELECT {_COLUMNS} FROM accounts WHERE email = %s"
        return self._fetch_one(sql, (email,))

    def create(self, account: Account) -> Account:
        """
        Insert a new account, failing on an email collision.

        Raises:
            AccountAlreadyExists: If the email is already registered
            PersistenceFailure: If the database is unavailable
        """
        _require_hash(account)
        sql = f"""
            INSERT INTO accounts (
                id, email, first_name, last_name, password_hash,
                verification_code, password_reset_code, verified,
                created_at, updated_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, NOW(), NOW())
            ON CONFLICT (email) DO NOTHING
            RETURNING {_COLUMNS}
        """
        params = (
            account.id,
            account.email,
            account.first_name,
            account.last_name,
            account.password_hash,
            account.verification_code,
            account.password_reset_code,
            account.verified,
        )
        row = self._execute_write(sql, params)
        if row is None:
            raise AccountAlreadyExists(account.email)
        return _row_to_account(row)

    def update(self, account: Account) -> Account:
        """
        Write the mutable fields of an account (last write wins).

        Raises:
            AccountNotFound: If the account does not exist
            PersistenceFailure: If the database is unavailable
        """
        _require_hash(account)
        sql = f"""
            UPDATE accounts
            SET first_name = %s,
                last_name = %s,
                password_hash = %s,
                password_reset_code = %s,
                verified = verified OR %s,
                updated_at = NOW()
            WHERE id = %s
            RETURNING {_COLUMNS}
        """
        row = self._execute_write(sql, self._update_params(account))
        if row is None:
            raise AccountNotFound(account.id)
        return _row_to_account(row)

    def mark_verified(self, account_id: str) -> Account:
        """
        Raises:
            AccountNotFound: If the account does not exist
            PersistenceFailure: If the database is unavailable
        """
        sql = f"""
            UPDATE accounts
            SET verified = TRUE,
                updated_at = NOW()
            WHERE id = %s
            RETURNING {_COLUMNS}
        """
        row = self._execute_write(sql, (account_id,))
        if row is None:
            raise AccountNotFound(account_id)
        return _row_to_account(row)

    def set_reset_code(self, account_id: str, code: str) -> Account:
        """
        Raises:
            AccountNotFound: If no verified account has this id
            PersistenceFailure: If the database is unavailable
        """
        sql = f"""
            UPDATE accounts
            SET password_reset_code = %s,
                updated_at = NOW()
            WHERE id = %s AND verified
            RETURNING {_COLUMNS}
        """
        row = self._execute_write(sql, (code, account_id))
        if row is None:
            raise AccountNotFound(account_id)
        return _row_to_account(row)

    def update_if_reset_code(self, account: Account, expected_code: str) -> Account | None:
        """
        Write the account only while its reset code still equals expected_code.

        Returns:
            The stored account, or None if the code was consumed or replaced
        """
        _require_hash(account)
        sql = f"""
            UPDATE accounts
            SET first_name = %s,
                last_name = %s,
                password_hash = %s,
                password_reset_code = %s,
                verified = verified OR %s,
                updated_at = NOW()
            WHERE id = %s AND password_reset_code = %s
            RETURNING {_COLUMNS}
        """
        row = self._execute_write(sql, (*self._update_params(account), expected_code))
        return _row_to_account(row) if row is not None else None

    def ping(self) -> None:
        """Check database connectivity."""
        try:
            with self._pool.connection() as conn:
                conn.execute("SELECT 1")
        except psycopg.Error as e:
            raise PersistenceFailure("Account store unavailable") from e

    @staticmethod
    def _update_params(account: Account) -> tuple:
        return (
            account.first_name,
            account.last_name,
            account.password_hash,
            account.password_reset_code,
            account.verified,
            account.id,
        )

    def _fetch_one(self, sql: str, params: tuple) -> Account | None:
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error("Account lookup failed: %s", e)
            raise PersistenceFailure("Account store unavailable") from e
        return _row_to_account(row) if row is not None else None

    def _execute_write(self, sql: str, params: tuple) -> tuple | None:
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                row = cursor.fetchone()
                conn.commit()
        except errors.CheckViolation as e:
            raise PersistenceFailure("Refusing to persist a password that is not hashed") from e
        except psycopg.Error as e:
            logger.error("Account write failed: %s", e)
            raise PersistenceFailure("Account store unavailable") from e
        return row


def _require_hash(account: Account) -> None:
    if not is_password_hash(account.password_hash):
        raise PersistenceFailure("Refusing to persist a password that is not hashed")


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except psycopg.Error as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e

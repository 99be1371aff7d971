"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from enum import Enum
from typing import Protocol

from .account import Account


class VerifyResult(Enum):
    """
    Successful outcome of a verification attempt.

    Failures are raised as exceptions (AccountNotFound,
    InvalidVerificationCode).
    """

    VERIFIED = "verified"
    ALREADY_VERIFIED = "already_verified"


class ResetRequestResult(Enum):
    """
    Outcome of a password reset request.

    Only ISSUED creates a reset code. The HTTP layer decides how much of
    the difference between the other outcomes callers get to see.
    """

    ISSUED = "issued"
    UNKNOWN_EMAIL = "unknown_email"
    NOT_VERIFIED = "not_verified"


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def get_by_id(self, account_id: str) -> Account | None:
        """Return the account with this id, or None."""
        ...

    def get_by_email(self, email: str) -> Account | None:
        """Return the account with this normalized email, or None."""
        ...

    def create(self, account: Account) -> Account:
        """
        Insert a new account.

        Email uniqueness is enforced atomically by the store.

        Returns:
            The stored account with timestamps filled in

        Raises:
            AccountAlreadyExists: If the email is already taken
            PersistenceFailure: If the store is unavailable
        """
        ...

    def update(self, account: Account) -> Account:
        """
        Overwrite the mutable fields of an existing account (last write wins).

        Single-field transitions use ``mark_verified`` and ``set_reset_code``.

        Raises:
            AccountNotFound: If the account no longer exists
            PersistenceFailure: If the store is unavailable
        """
        ...

    def mark_verified(self, account_id: str) -> Account:
        """
        Set ``verified`` on the stored record, leaving every other field as is.

        Raises:
            AccountNotFound: If the account no longer exists
            PersistenceFailure: If the store is unavailable
        """
        ...

    def set_reset_code(self, account_id: str, code: str) -> Account:
        """
        Store a new pending reset code on a verified account, leaving every
        other field as is.

        Raises:
            AccountNotFound: If no verified account has this id
            PersistenceFailure: If the store is unavailable
        """
        ...

    def update_if_reset_code(self, account: Account, expected_code: str) -> Account | None:
        """
        Atomically update an account only while its stored reset code
        still equals ``expected_code``.

        Returns:
            The stored account, or None if the code no longer matches
        """
        ...


class Notifier(Protocol):
    """Port interface for out-of-band message delivery."""

    def send(self, to: str, subject: str, body: str) -> bool:
        """
        Deliver a plain text message.

        Returns:
            True if the message was handed off, False otherwise
        """
        ...

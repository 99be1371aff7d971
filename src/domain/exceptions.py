"""
Domain exceptions - Semantic error types for the account lifecycle.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
"""

from .account import Account


class AccountError(Exception):
    """Base class for account lifecycle domain errors."""

    pass


class AccountAlreadyExists(AccountError):
    """An account with the same normalized email already exists."""

    pass


class AccountNotFound(AccountError):
    """No account matches the given identifier."""

    pass


class InvalidVerificationCode(AccountError):
    """Supplied verification code does not match the stored one."""

    pass


class InvalidResetCode(AccountError):
    """Account missing, no reset pending, or reset code mismatch."""

    pass


class PersistenceFailure(AccountError):
    """The account store is unavailable or refused the write."""

    pass


class NotificationFailed(AccountError):
    """
    Delivery failed after the state change was persisted.

    The persisted change is kept; ``account`` is the record as stored.
    """

    def __init__(self, account: Account, message: str = "Notification could not be delivered") -> None:
        super().__init__(message)
        self.account = account

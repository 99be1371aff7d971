"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for the account lifecycle:
registration, email verification, and password reset. It defines its own
port interfaces for infrastructure abstraction, ensuring true hexagonal
architecture decoupling.
"""

from .account import Account, normalize_email
from .codes import generate_code
from .exceptions import (
    AccountAlreadyExists,
    AccountError,
    AccountNotFound,
    InvalidResetCode,
    InvalidVerificationCode,
    NotificationFailed,
    PersistenceFailure,
)
from .hashing import CredentialHasher, is_password_hash
from .lifecycle import AccountLifecycleService
from .ports import AccountRepository, Notifier, ResetRequestResult, VerifyResult

__all__ = [
    "Account",
    "AccountAlreadyExists",
    "AccountError",
    "AccountLifecycleService",
    "AccountNotFound",
    "AccountRepository",
    "CredentialHasher",
    "InvalidResetCode",
    "InvalidVerificationCode",
    "NotificationFailed",
    "Notifier",
    "PersistenceFailure",
    "ResetRequestResult",
    "VerifyResult",
    "generate_code",
    "is_password_hash",
    "normalize_email",
]

"""
Account entity - the persisted identity record.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Account:
    """
    A user account with credential and lifecycle-state fields.

    ``password_hash`` always holds an Argon2id digest. ``password_reset_code``
    is set only while a password reset is pending. ``created_at`` and
    ``updated_at`` are maintained by the store.
    """

    id: str
    email: str
    first_name: str
    last_name: str
    password_hash: str
    verification_code: str
    password_reset_code: str | None = None
    verified: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def reset_pending(self) -> bool:
        return self.password_reset_code is not None


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()

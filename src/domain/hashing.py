"""
Credential hasher - Argon2id password hashing and verification.

Hashing parameters are fixed when the hasher is built, so every account
is protected by the same cost settings. Each call to ``hash`` draws a new
random salt, so the same plaintext never produces the same digest twice.
"""

import logging
from functools import cached_property
from typing import TYPE_CHECKING

from argon2 import PasswordHasher, Type, extract_parameters
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

if TYPE_CHECKING:
    from src.config.settings import Settings

logger = logging.getLogger(__name__)


def is_password_hash(value: str | None) -> bool:
    """Whether ``value`` is an encoded Argon2 digest rather than plaintext."""
    if not value:
        return False
    try:
        extract_parameters(value)
    except InvalidHashError:
        return False
    return True


class CredentialHasher:
    """One-way password hashing with Argon2id."""

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ) -> None:
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "CredentialHasher":
        return cls(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
        )

    def hash(self, plaintext: str) -> str:
        """Hash a password, returning an encoded ``$argon2id$`` digest."""
        return self._hasher.hash(plaintext)

    def verify(self, digest: str, candidate: str) -> bool:
        """
        Check a candidate password against a stored digest.

        Returns False on mismatch. A malformed digest is logged and
        reported as a mismatch instead of raising.
        """
        try:
            return self._hasher.verify(digest, candidate)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as exc:
            logger.warning("Could not validate password: %s", exc)
            return False

    @cached_property
    def dummy_hash(self) -> str:
        """Digest used when no account exists, keeping verify timing uniform."""
        return self.hash("dummy_password_for_timing_safety")

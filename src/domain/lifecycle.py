"""
Account lifecycle domain service - verification and password reset state machine.

This module contains the core business logic for the account lifecycle:
registration, email verification, and password reset.

Account State Machine
=====================

Two orthogonal dimensions:
- verified: False -> True (exactly once, never back)
- password_reset_code: absent <-> present (only while verified)

Valid Transitions:
    Unverified               -> Verified                (verify, code match)
    Verified, no reset code  -> Verified, reset code    (request_password_reset)
    Verified, reset code     -> Verified, new reset code (request_password_reset again)
    Verified, reset code     -> Verified, no reset code (complete_password_reset, code match)

Unverified accounts never enter the reset-pending state.

Concurrency: each operation reads then writes a single record. Verification
and reset requests write only the field they own (mark_verified,
set_reset_code). Password reset completion writes through the repository's
conditional update keyed on the expected reset code, so a completion racing
another completion or a newer reset request fails instead of overwriting.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass, field
from typing import Callable

from .account import Account, normalize_email
from .codes import generate_code
from .exceptions import (
    AccountAlreadyExists,
    AccountNotFound,
    InvalidResetCode,
    InvalidVerificationCode,
    NotificationFailed,
)
from .hashing import CredentialHasher
from .ports import AccountRepository, Notifier, ResetRequestResult, VerifyResult

logger = logging.getLogger(__name__)


def _codes_match(stored: str, supplied: str) -> bool:
    return secrets.compare_digest(stored.encode(), supplied.encode())


@dataclass
class AccountLifecycleService:
    """
    Domain service for the account lifecycle.

    Orchestrates email normalization, password hashing, code generation,
    persistence, and notification for each lifecycle operation.
    """

    repository: AccountRepository
    notifier: Notifier
    hasher: CredentialHasher = field(default_factory=CredentialHasher)
    code_generator: Callable[[], str] = generate_code

    def register(
        self,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        password_confirmation: str,
    ) -> Account:
        """
        Create a new unverified account and send its verification code.

        Args:
            email: User's email address (will be normalized)
            first_name: Display first name
            last_name: Display last name
            password: User's password (will be hashed)
            password_confirmation: Must equal password

        Returns:
            The created account

        Raises:
            ValueError: If password and confirmation differ
            AccountAlreadyExists: If the email is already registered
            NotificationFailed: If the account was created but the
                verification email could not be delivered
        """
        if password != password_confirmation:
            raise ValueError("Passwords do not match")

        account = Account(
            id=uuid.uuid4().hex,
            email=normalize_email(email),
            first_name=first_name,
            last_name=last_name,
            password_hash=self.hasher.hash(password),
            verification_code=self.code_generator(),
        )

        try:
            account = self.repository.create(account)
        except AccountAlreadyExists:
            logger.info("Registration rejected, email already exists")
            raise

        logger.info("Account %s created", account.id)
        self._notify(
            account,
            subject="Please verify your account",
            body=f"Verification code {account.verification_code}. Id: {account.id}",
        )
        return account

    def verify(self, account_id: str, code: str) -> VerifyResult:
        """
        Prove email ownership with the verification code.

        Verification codes do not expire and are not rotated; the code
        stays valid until its first successful use. Once verified, any
        further call succeeds without touching the record.

        Raises:
            AccountNotFound: If no account has this id
            InvalidVerificationCode: If the code does not match
        """
        account = self.repository.get_by_id(account_id)
        if account is None:
            raise AccountNotFound(account_id)

        if account.verified:
            return VerifyResult.ALREADY_VERIFIED

        if not _codes_match(account.verification_code, code):
            logger.info("Verification code mismatch for account %s", account_id)
            raise InvalidVerificationCode(account_id)

        self.repository.mark_verified(account_id)
        logger.info("Account %s verified", account_id)
        return VerifyResult.VERIFIED

    def request_password_reset(self, email: str) -> ResetRequestResult:
        """
        Issue a new password reset code for a verified account.

        Any pending reset code is replaced. Unknown and unverified emails
        leave the store untouched.

        Raises:
            NotificationFailed: If the code was stored but the reset
                email could not be delivered
        """
        normalized_email = normalize_email(email)
        account = self.repository.get_by_email(normalized_email)

        if account is None:
            logger.debug("Password reset requested for unknown email")
            return ResetRequestResult.UNKNOWN_EMAIL

        if not account.verified:
            logger.debug("Password reset requested for unverified account %s", account.id)
            return ResetRequestResult.NOT_VERIFIED

        account = self.repository.set_reset_code(account.id, self.code_generator())

        self._notify(
            account,
            subject="Reset your password",
            body=f"Password reset code: {account.password_reset_code} Id: {account.id}",
        )
        logger.debug("Password reset email sent for account %s", account.id)
        return ResetRequestResult.ISSUED

    def complete_password_reset(
        self,
        account_id: str,
        code: str,
        new_password: str,
        new_password_confirmation: str,
    ) -> Account:
        """
        Replace the password using a pending reset code.

        Returns immediately on any mismatch without touching the password.
        The reset code is single-use: replaying a completed reset fails.

        Raises:
            ValueError: If new password and confirmation differ
            InvalidResetCode: If the account is missing, no reset is
                pending, the code does not match, or the code was consumed
                or replaced concurrently
        """
        if new_password != new_password_confirmation:
            raise ValueError("Passwords do not match")

        account = self.repository.get_by_id(account_id)
        if account is None or account.password_reset_code is None:
            raise InvalidResetCode(account_id)

        expected_code = account.password_reset_code
        if not _codes_match(expected_code, code):
            logger.info("Password reset code mismatch for account %s", account_id)
            raise InvalidResetCode(account_id)

        account.password_reset_code = None
        self._apply_password(account, new_password)

        stored = self.repository.update_if_reset_code(account, expected_code)
        if stored is None:
            logger.warning("Password reset code for account %s changed concurrently", account_id)
            raise InvalidResetCode(account_id)

        logger.info("Password reset completed for account %s", account_id)
        return stored

    def check_password(self, email: str, candidate: str) -> bool:
        """
        Check a candidate password for the account with this email.

        Unknown emails still run a full hash verification against a dummy
        digest so response time does not reveal whether the account exists.
        """
        account = self.repository.get_by_email(normalize_email(email))
        digest = account.password_hash if account is not None else self.hasher.dummy_hash
        valid = self.hasher.verify(digest, candidate)
        return account is not None and valid

    def _apply_password(self, account: Account, plaintext: str) -> None:
        """
        Set the password, hashing only when it actually changes.

        If the plaintext already verifies against the stored digest, the
        existing hash is passed through unchanged.
        """
        if self.hasher.verify(account.password_hash, plaintext):
            return
        account.password_hash = self.hasher.hash(plaintext)

    def _notify(self, account: Account, subject: str, body: str) -> None:
        """Send a message after a persisted change; failures never roll it back."""
        try:
            sent = self.notifier.send(account.email, subject, body)
        except Exception as exc:
            logger.error("Notification to account %s failed: %s", account.id, exc)
            raise NotificationFailed(account) from exc

        if not sent:
            logger.error("Notification to account %s was not delivered", account.id)
            raise NotificationFailed(account)

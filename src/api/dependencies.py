"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from functools import lru_cache, partial

from fastapi import Depends, Request

from src.adapters.smtp.console import ConsoleNotifier
from src.config.settings import Settings, get_settings
from src.domain.codes import generate_code
from src.domain.hashing import CredentialHasher
from src.domain.lifecycle import AccountLifecycleService
from src.domain.ports import AccountRepository, Notifier


def get_repository(request: Request) -> AccountRepository:
    """
    Get the account repository from app state.

    The repository is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.repository


@lru_cache
def get_notifier() -> ConsoleNotifier:
    """Get console notifier (singleton, stateless)."""
    return ConsoleNotifier(sender=get_settings().mail_from)


@lru_cache
def get_hasher() -> CredentialHasher:
    """Get the credential hasher built from the fixed Argon2 settings."""
    return CredentialHasher.from_settings(get_settings())


def get_lifecycle_service(
    repository: AccountRepository = Depends(get_repository),
    notifier: Notifier = Depends(get_notifier),
    hasher: CredentialHasher = Depends(get_hasher),
    settings: Settings = Depends(get_settings),
) -> AccountLifecycleService:
    """
    Create lifecycle service with injected dependencies.

    Wires together the repository, notifier and hasher for the domain service.
    """
    return AccountLifecycleService(
        repository=repository,
        notifier=notifier,
        hasher=hasher,
        code_generator=partial(generate_code, settings.code_size),
    )

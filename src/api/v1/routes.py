"""
API v1 routes.

Defines REST endpoints for the account lifecycle:
- POST /v1/users - Register a new account
- POST /v1/users/verify/{id}/{verification_code} - Verify email ownership
- POST /v1/users/forgotpassword - Request a password reset code
- POST /v1/users/resetpassword/{id}/{password_reset_code} - Set a new password
"""

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import get_lifecycle_service
from src.api.models import (
    ErrorResponse,
    ForgotPasswordRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
)
from src.config.settings import Settings, get_settings
from src.domain.exceptions import (
    AccountAlreadyExists,
    AccountNotFound,
    InvalidResetCode,
    InvalidVerificationCode,
    NotificationFailed,
)
from src.domain.lifecycle import AccountLifecycleService
from src.domain.ports import ResetRequestResult, VerifyResult

router = APIRouter(tags=["v1"])

FORGOT_PASSWORD_MESSAGE = (
    "If a user with that email is registered you will receive a password reset email"
)


@router.post(
    "/users",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "Email already registered"},
        422: {"description": "Validation error"},
        502: {"model": ErrorResponse, "description": "Account created, email not delivered"},
    },
    summary="Register a new user",
    description="Create an unverified account. A verification code is sent to the email.",
)
def register(
    request_data: RegisterRequest,
    service: AccountLifecycleService = Depends(get_lifecycle_service),
) -> RegisterResponse:
    """
    Register a new user and send verification code.

    - **email**: Valid email address to register
    - **password**: Password (minimum 6 characters), repeated in **password_confirmation**
    """
    try:
        account = service.register(
            request_data.email,
            request_data.first_name,
            request_data.last_name,
            request_data.password,
            request_data.password_confirmation,
        )
    except AccountAlreadyExists:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Account already exists",
        ) from None
    except NotificationFailed:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="User created but verification email could not be sent",
        ) from None
    return RegisterResponse(message="User successfully created", id=account.id)


@router.post(
    "/users/verify/{account_id}/{verification_code}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Could not verify user"}},
    summary="Verify email ownership",
)
def verify(
    account_id: str,
    verification_code: str,
    service: AccountLifecycleService = Depends(get_lifecycle_service),
) -> MessageResponse:
    """
    Verify an account with the code received by email.

    Unknown ids and wrong codes get the same response.
    """
    try:
        result = service.verify(account_id, verification_code)
    except (AccountNotFound, InvalidVerificationCode):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Could not verify user",
        ) from None

    if result == VerifyResult.ALREADY_VERIFIED:
        return MessageResponse(message="User is already verified")
    return MessageResponse(message="User successfully verified")


@router.post(
    "/users/forgotpassword",
    response_model=MessageResponse,
    summary="Request a password reset code",
)
def forgot_password(
    request_data: ForgotPasswordRequest,
    service: AccountLifecycleService = Depends(get_lifecycle_service),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    """
    Send a password reset code to a verified account.

    Known and unknown emails get the same response. Unverified accounts
    get it too unless ``reveal_unverified_on_reset`` is enabled.
    """
    try:
        result = service.request_password_reset(request_data.email)
    except NotificationFailed:
        # Response must not reveal that the account exists
        return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)

    if result == ResetRequestResult.NOT_VERIFIED and settings.reveal_unverified_on_reset:
        return MessageResponse(message="User is not verified")
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/users/resetpassword/{account_id}/{password_reset_code}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Could not reset user password"}},
    summary="Complete a password reset",
)
def reset_password(
    account_id: str,
    password_reset_code: str,
    request_data: ResetPasswordRequest,
    service: AccountLifecycleService = Depends(get_lifecycle_service),
) -> MessageResponse:
    """Set a new password using the pending reset code."""
    try:
        service.complete_password_reset(
            account_id,
            password_reset_code,
            request_data.password,
            request_data.password_confirmation,
        )
    except InvalidResetCode:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Could not reset user password",
        ) from None
    return MessageResponse(message="Successfully updated password")

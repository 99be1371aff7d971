"""
Unit tests for API v1 routes.

Tests endpoint responses with a mocked lifecycle service.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.dependencies import get_lifecycle_service
from src.api.v1.routes import FORGOT_PASSWORD_MESSAGE, router
from src.config.settings import Settings, get_settings
from src.domain.account import Account
from src.domain.exceptions import (
    AccountAlreadyExists,
    AccountNotFound,
    InvalidResetCode,
    InvalidVerificationCode,
    NotificationFailed,
)
from src.domain.lifecycle import AccountLifecycleService
from src.domain.ports import ResetRequestResult, VerifyResult

REGISTRATION = {
    "email": "alice@example.com",
    "first_name": "Alice",
    "last_name": "A",
    "password": "secret1",
    "password_confirmation": "secret1",
}


def make_account() -> Account:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return Account(
        id="acc-1",
        email="alice@example.com",
        first_name="Alice",
        last_name="A",
        password_hash="$argon2id$v=19$m=8,t=1,p=1$c2FsdHNhbHQ$aGFzaGhhc2g",
        verification_code="verification-code-xyz",
        password_reset_code="reset-code-abcdefghij",
        verified=True,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def mock_service() -> MagicMock:
    return MagicMock(spec=AccountLifecycleService)


@pytest.fixture
def app(mock_service: MagicMock) -> FastAPI:
    """Create test FastAPI application with the service overridden."""
    test_app = FastAPI()
    test_app.include_router(router, prefix="/v1")
    test_app.dependency_overrides[get_lifecycle_service] = lambda: mock_service
    return test_app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


class TestRegisterEndpoint:
    """Tests for POST /v1/users."""

    def test_register_success_returns_201(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.register.return_value = make_account()

        response = client.post("/v1/users", json=REGISTRATION)

        assert response.status_code == 201
        assert response.json() == {"message": "User successfully created", "id": "acc-1"}
        mock_service.register.assert_called_once_with(
            "alice@example.com", "Alice", "A", "secret1", "secret1"
        )

    def test_register_response_has_no_secrets(self, client: TestClient, mock_service: MagicMock) -> None:
        account = make_account()
        mock_service.register.return_value = account

        body = client.post("/v1/users", json=REGISTRATION).text

        assert account.password_hash not in body
        assert account.verification_code not in body
        assert "secret1" not in body

    def test_register_duplicate_returns_409(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.register.side_effect = AccountAlreadyExists("alice@example.com")

        response = client.post("/v1/users", json=REGISTRATION)

        assert response.status_code == 409
        assert response.json() == {"detail": "Account already exists"}

    def test_register_notification_failure_returns_502(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        mock_service.register.side_effect = NotificationFailed(make_account())

        response = client.post("/v1/users", json=REGISTRATION)

        assert response.status_code == 502
        assert "could not be sent" in response.json()["detail"]

    def test_register_password_mismatch_returns_422(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        response = client.post(
            "/v1/users", json={**REGISTRATION, "password_confirmation": "different"}
        )

        assert response.status_code == 422
        mock_service.register.assert_not_called()

    def test_register_validates_email(self, client: TestClient) -> None:
        response = client.post("/v1/users", json={**REGISTRATION, "email": "invalid-email"})
        assert response.status_code == 422


class TestVerifyEndpoint:
    """Tests for POST /v1/users/verify/{id}/{code}."""

    def test_verify_success(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.verify.return_value = VerifyResult.VERIFIED

        response = client.post("/v1/users/verify/acc-1/code-1")

        assert response.status_code == 200
        assert response.json() == {"message": "User successfully verified"}
        mock_service.verify.assert_called_once_with("acc-1", "code-1")

    def test_verify_already_verified(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.verify.return_value = VerifyResult.ALREADY_VERIFIED

        response = client.post("/v1/users/verify/acc-1/code-1")

        assert response.status_code == 200
        assert response.json() == {"message": "User is already verified"}

    @pytest.mark.parametrize("error", [AccountNotFound("acc-1"), InvalidVerificationCode("acc-1")])
    def test_verify_failures_are_identical(
        self, client: TestClient, mock_service: MagicMock, error: Exception
    ) -> None:
        """Unknown ids and wrong codes cannot be told apart."""
        mock_service.verify.side_effect = error

        response = client.post("/v1/users/verify/acc-1/code-1")

        assert response.status_code == 400
        assert response.json() == {"detail": "Could not verify user"}


class TestForgotPasswordEndpoint:
    """Tests for POST /v1/users/forgotpassword."""

    @pytest.mark.parametrize("result", list(ResetRequestResult))
    def test_all_outcomes_return_generic_message(
        self, client: TestClient, mock_service: MagicMock, result: ResetRequestResult
    ) -> None:
        mock_service.request_password_reset.return_value = result

        response = client.post("/v1/users/forgotpassword", json={"email": "alice@example.com"})

        assert response.status_code == 200
        assert response.json() == {"message": FORGOT_PASSWORD_MESSAGE}

    def test_notification_failure_returns_generic_message(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        mock_service.request_password_reset.side_effect = NotificationFailed(make_account())

        response = client.post("/v1/users/forgotpassword", json={"email": "alice@example.com"})

        assert response.status_code == 200
        assert response.json() == {"message": FORGOT_PASSWORD_MESSAGE}

    def test_not_verified_revealed_when_configured(
        self, app: FastAPI, client: TestClient, mock_service: MagicMock
    ) -> None:
        app.dependency_overrides[get_settings] = lambda: Settings(reveal_unverified_on_reset=True)
        mock_service.request_password_reset.return_value = ResetRequestResult.NOT_VERIFIED

        response = client.post("/v1/users/forgotpassword", json={"email": "alice@example.com"})

        assert response.json() == {"message": "User is not verified"}

    def test_invalid_email_returns_422(self, client: TestClient) -> None:
        response = client.post("/v1/users/forgotpassword", json={"email": "nope"})
        assert response.status_code == 422


class TestResetPasswordEndpoint:
    """Tests for POST /v1/users/resetpassword/{id}/{code}."""

    def test_reset_success(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.complete_password_reset.return_value = make_account()

        response = client.post(
            "/v1/users/resetpassword/acc-1/code-1",
            json={"password": "newpass1", "password_confirmation": "newpass1"},
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Successfully updated password"}
        mock_service.complete_password_reset.assert_called_once_with(
            "acc-1", "code-1", "newpass1", "newpass1"
        )

    def test_reset_invalid_code_returns_400(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.complete_password_reset.side_effect = InvalidResetCode("acc-1")

        response = client.post(
            "/v1/users/resetpassword/acc-1/code-1",
            json={"password": "newpass1", "password_confirmation": "newpass1"},
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "Could not reset user password"}

    def test_reset_mismatch_returns_422(self, client: TestClient, mock_service: MagicMock) -> None:
        response = client.post(
            "/v1/users/resetpassword/acc-1/code-1",
            json={"password": "newpass1", "password_confirmation": "newpass2"},
        )

        assert response.status_code == 422
        mock_service.complete_password_reset.assert_not_called()

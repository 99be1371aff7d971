"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Response models never carry password hashes or verification/reset codes.
"""

from pydantic import BaseModel, EmailStr, Field, model_validator


class RegisterRequest(BaseModel):
    """Request model for user registration."""

    email: EmailStr
    first_name: str = Field(..., min_length=1, description="First name is required")
    last_name: str = Field(..., min_length=1, description="Last name is required")
    password: str = Field(..., min_length=6, description="User password (min 6 characters)")
    password_confirmation: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.password_confirmation:
            raise ValueError("Passwords do not match")
        return self


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    message: str
    id: str


class ForgotPasswordRequest(BaseModel):
    """Request model for starting a password reset."""

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Request model for completing a password reset."""

    password: str = Field(..., min_length=6, description="New password (min 6 characters)")
    password_confirmation: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordRequest":
        if self.password != self.password_confirmation:
            raise ValueError("Passwords do not match")
        return self


class MessageResponse(BaseModel):
    """Plain success message."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str

"""Pydantic schemas for registration, login and token responses."""

from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RecaptchaMixin(BaseModel):
    recaptcha_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("recaptchaToken", "g-recaptcha-response"),
        description="Token issued by the reCAPTCHA widget.",
    )


class RegisterRequest(RecaptchaMixin):
    nome: Optional[str] = None
    email: Optional[str] = None
    senha: Optional[str] = None


class LoginRequest(RecaptchaMixin):
    email: Optional[str] = None
    senha: Optional[str] = None


class UsuarioResponse(BaseModel):
    """Public view of a user; never carries the password hash."""

    id: int
    nome: str
    email: str
    papel: int

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    token_type: Literal["Bearer"] = "Bearer"
    access_token: str
    expires_in: int = Field(..., description="Access token lifetime in seconds.")
    user: UsuarioResponse

"""Utility for generating and decoding the access and refresh JWTs."""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from uuid_extensions import uuid7

from app.models.usuario import Usuario
from app.settings import settings

REFRESH_TOKEN_TYPE = "refresh"


class InvalidRefreshToken(Exception):
    """Raised when a refresh token is malformed, expired or of the wrong type."""


def access_token_expires_in() -> int:
    """Lifetime of an access token, in seconds."""
    return settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


def refresh_token_max_age() -> int:
    """Lifetime of a refresh token, in seconds."""
    return settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60


def create_access_token(usuario: Usuario) -> str:
    """
    Creates a short-lived access token for the given user.

    Args:
        usuario (Usuario): The authenticated user.

    Returns:
        str: The encoded JWT token.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "iat": now,
        "exp": now + timedelta(seconds=access_token_expires_in()),
        "sub": str(usuario.id),
        "papel": usuario.papel,
        "nome": usuario.nome,
    }
    return jwt.encode(
        payload, settings.JWT_ACCESS_SECRET, algorithm=settings.JWT_ALGORITHM
    )


def create_refresh_token(usuario: Usuario) -> str:
    """
    Creates a refresh token for the given user. Every call yields a distinct
    token thanks to the `jti` claim.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "iat": now,
        "exp": now + timedelta(seconds=refresh_token_max_age()),
        "sub": str(usuario.id),
        "tipo": REFRESH_TOKEN_TYPE,
        "jti": uuid7().hex,
    }
    return jwt.encode(
        payload, settings.JWT_REFRESH_SECRET, algorithm=settings.JWT_ALGORITHM
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decodes an access token. Raises jwt.ExpiredSignatureError or
    jwt.InvalidTokenError, left for the caller to map.
    """
    return jwt.decode(
        token,
        settings.JWT_ACCESS_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["exp", "sub"]},
    )


def decode_refresh_token(token: str) -> int:
    """
    Validates a refresh token and returns the user id it was issued for.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_REFRESH_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.InvalidTokenError as e:
        raise InvalidRefreshToken(str(e)) from e

    if payload.get("tipo") != REFRESH_TOKEN_TYPE:
        raise InvalidRefreshToken("Token is not a refresh token")

    try:
        return int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise InvalidRefreshToken("Malformed subject") from e

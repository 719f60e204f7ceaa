"""Dependencies for API endpoints."""

from typing import AsyncGenerator, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.db import SessionLocal
from app.models.usuario import Usuario
from app.utils.jwt_manager import decode_access_token
from app.utils.logging_config import logger

# auto_error is off so a missing header yields 401 instead of 403
reusable_oauth2 = HTTPBearer(scheme_name="Bearer", auto_error=False)

UNAUTHENTICATED = "não autenticado"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency to get a DB session.
    """
    async with SessionLocal() as session:
        yield session


async def get_current_user(
    token: Optional[HTTPAuthorizationCredentials] = Depends(reusable_oauth2),
    db: AsyncSession = Depends(get_db_session),
) -> Usuario:
    """
    Dependency to get the current user from the access token in the
    Authorization header.
    """
    if token is None:
        raise _unauthorized(UNAUTHENTICATED)

    try:
        payload = decode_access_token(token.credentials)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expirado.") from None
    except jwt.InvalidTokenError as e:
        raise _unauthorized("Token inválido.") from e

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as e:
        logger.warning(f"Malformed user ID in token: {payload.get('sub')}. Error: {e}")
        raise _unauthorized("Token inválido.") from e

    user = await db.get(Usuario, user_id)
    if user is None:
        raise _unauthorized(UNAUTHENTICATED)
    return user

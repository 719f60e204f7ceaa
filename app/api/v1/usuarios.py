"""API endpoints for registration, login and token refresh."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.api.deps import get_current_user, get_db_session
from app.middleware.rate_limit import auth_limiter, client_ip
from app.models.usuario import Papel, Usuario
from app.schemas.usuario import LoginRequest, RegisterRequest, TokenResponse, UsuarioResponse
from app.services.recaptcha import verify_recaptcha
from app.settings import settings
from app.utils.db_errors import raise_for_integrity_error
from app.utils.jwt_manager import (
    InvalidRefreshToken,
    access_token_expires_in,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    refresh_token_max_age,
)
from app.utils.logging_config import logger
from app.utils.passwords import dummy_verify, hash_password, verify_password

# The refresh cookie is only sent back to this router's routes.
ROUTER_PREFIX = "/api/usuarios"
MIN_SENHA_LENGTH = 6
INVALID_CREDENTIALS = "credenciais inválidas"

router = APIRouter()


def _set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=token,
        max_age=refresh_token_max_age(),
        path=ROUTER_PREFIX,
        secure=settings.REFRESH_COOKIE_SECURE,
        httponly=True,
        samesite="lax",
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        path=ROUTER_PREFIX,
        secure=settings.REFRESH_COOKIE_SECURE,
        httponly=True,
        samesite="lax",
    )


def _issue_tokens(response: Response, usuario: Usuario) -> TokenResponse:
    """Signs a new access/refresh pair and stores the refresh token in the cookie."""
    _set_refresh_cookie(response, create_refresh_token(usuario))
    return TokenResponse(
        access_token=create_access_token(usuario),
        expires_in=access_token_expires_in(),
        user=UsuarioResponse.model_validate(usuario),
    )


def _refresh_rejected(detail: str) -> JSONResponse:
    response = JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": detail}
    )
    _clear_refresh_cookie(response)
    return response


@router.post(
    "/register",
    status_code=201,
    response_model=TokenResponse,
    dependencies=[Depends(auth_limiter)],
    summary="Register a new user",
)
async def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    """
    Creates a plain user (papel 0) and logs it in right away.
    """
    await verify_recaptcha(body.recaptcha_token, client_ip(request))

    nome = (body.nome or "").strip()
    email = (body.email or "").strip().lower()
    if not nome or not email or not body.senha:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, "nome, email e senha são obrigatórios"
        )
    if len(body.senha) < MIN_SENHA_LENGTH:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            f"senha deve ter pelo menos {MIN_SENHA_LENGTH} caracteres",
        )

    senha_hash = await run_in_threadpool(hash_password, body.senha)
    usuario = Usuario(nome=nome, email=email, senha_hash=senha_hash, papel=Papel.USUARIO)
    db.add(usuario)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise_for_integrity_error(e, unique_detail="email já cadastrado")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to register user: {e}", exc_info=True)
        raise HTTPException(500, "erro interno") from e
    await db.refresh(usuario)

    logger.info(f"User registered: id={usuario.id}")
    return _issue_tokens(response, usuario)


@router.post(
    "/login",
    response_model=TokenResponse,
    dependencies=[Depends(auth_limiter)],
    summary="Exchange credentials for tokens",
)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    await verify_recaptcha(body.recaptcha_token, client_ip(request))

    email = (body.email or "").strip().lower()
    if not email or not body.senha:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "email e senha são obrigatórios")

    usuario = await db.scalar(select(Usuario).where(Usuario.email == email))
    if usuario is None:
        await run_in_threadpool(dummy_verify)
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, INVALID_CREDENTIALS)
    if not await run_in_threadpool(verify_password, body.senha, usuario.senha_hash):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, INVALID_CREDENTIALS)

    return _issue_tokens(response, usuario)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    dependencies=[Depends(auth_limiter)],
    summary="Rotate the refresh token and mint a new access token",
)
async def refresh(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
):
    """
    Trusts the refresh token by signature only. A successful call replaces
    the cookie with a freshly signed refresh token.
    """
    token = request.cookies.get(settings.REFRESH_COOKIE_NAME)
    if not token:
        return _refresh_rejected("refresh token ausente")

    try:
        user_id = decode_refresh_token(token)
    except InvalidRefreshToken as e:
        logger.info(f"Refresh token rejected: {e}")
        return _refresh_rejected("refresh token inválido")

    usuario = await db.get(Usuario, user_id)
    if usuario is None:
        return _refresh_rejected("refresh token inválido")

    return _issue_tokens(response, usuario)


@router.post("/logout", status_code=204, summary="Clear the refresh cookie")
async def logout(response: Response) -> None:
    _clear_refresh_cookie(response)


@router.get("/me", response_model=UsuarioResponse)
async def me(current_user: Usuario = Depends(get_current_user)) -> Usuario:
    return current_user

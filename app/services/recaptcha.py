"""Google reCAPTCHA verification."""

from typing import Optional

import httpx
from fastapi import HTTPException, status

from app.settings import settings
from app.utils.logging_config import logger

VERIFY_TIMEOUT_SECONDS = 10.0


def recaptcha_enabled() -> bool:
    return bool(settings.RECAPTCHA_SECRET_KEY)


async def verify_recaptcha(
    token: Optional[str],
    remote_ip: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Optional[dict]:
    """
    Verifies a reCAPTCHA token against Google's siteverify endpoint.

    Does nothing while RECAPTCHA_SECRET_KEY is not configured.

    Returns:
        The verification payload returned by Google, or None when disabled.

    Raises:
        HTTPException: 400 without token, 502 when Google cannot be reached,
                       403 when the token is rejected.
    """
    if not recaptcha_enabled():
        return None

    if not token:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "reCAPTCHA é obrigatório.")

    data = {"secret": settings.RECAPTCHA_SECRET_KEY, "response": token}
    if remote_ip:
        data["remoteip"] = remote_ip

    client = http_client or httpx.AsyncClient(timeout=VERIFY_TIMEOUT_SECONDS)
    try:
        response = await client.post(settings.RECAPTCHA_VERIFY_URL, data=data)
        response.raise_for_status()
        body = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Failed to verify reCAPTCHA: {e}")
        raise HTTPException(
            status.HTTP_502_BAD_GATEWAY, "falha ao verificar reCAPTCHA"
        ) from e
    finally:
        if http_client is None:
            await client.aclose()

    if not body.get("success"):
        logger.warning(f"reCAPTCHA rejected: {body}")
        raise HTTPException(
            status.HTTP_403_FORBIDDEN, "verificação de reCAPTCHA falhou"
        )

    return body

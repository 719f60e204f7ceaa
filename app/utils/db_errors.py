"""Maps database integrity errors to HTTP errors."""

from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def integrity_error_code(error: IntegrityError) -> Optional[str]:
    """
    Returns the SQLSTATE of an integrity error. Drivers without SQLSTATE
    support (sqlite) are classified from their message.
    """
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code

    message = str(orig).lower()
    if "unique" in message:
        return UNIQUE_VIOLATION
    if "foreign key" in message:
        return FOREIGN_KEY_VIOLATION
    return None


def raise_for_integrity_error(
    error: IntegrityError,
    unique_detail: str = "registro duplicado",
    foreign_key_detail: str = "referência inválida (violação de chave estrangeira)",
) -> None:
    """Raises the HTTPException matching an integrity error."""
    code = integrity_error_code(error)
    if code == UNIQUE_VIOLATION:
        raise HTTPException(status.HTTP_409_CONFLICT, unique_detail) from error
    if code == FOREIGN_KEY_VIOLATION:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, foreign_key_detail) from error
    raise HTTPException(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "erro interno"
    ) from error

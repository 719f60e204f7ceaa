"""Password hashing helpers."""

from passlib.context import CryptContext

from app.settings import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(senha: str) -> str:
    return pwd_context.hash(senha)


def verify_password(senha: str, senha_hash: str) -> bool:
    return pwd_context.verify(senha, senha_hash)


def dummy_verify() -> None:
    """Spends the time of a real verification; used when the email is unknown."""
    pwd_context.dummy_verify()

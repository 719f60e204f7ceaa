"""Usuario model."""

import enum

from sqlalchemy import SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class Papel(enum.IntEnum):
    USUARIO = 0
    ADMIN = 1


class Usuario(BaseModel):
    __tablename__ = "usuarios"

    nome: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Stored trimmed and lower-cased.",
    )
    senha_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    papel: Mapped[int] = mapped_column(
        SmallInteger,
        nullable=False,
        default=Papel.USUARIO.value,
        server_default="0",
    )

    @property
    def is_admin(self) -> bool:
        return self.papel == Papel.ADMIN

    def __repr__(self) -> str:
        return f"<Usuario(id={self.id}, email='{self.email}', papel={self.papel})>"

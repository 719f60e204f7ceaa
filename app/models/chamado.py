"""Chamado model for tracking support requests."""

import enum
from typing import Optional

from sqlalchemy import Enum as EnumType
from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class ChamadoEstado(str, enum.Enum):
    ABERTO = "a"
    FINALIZADO = "f"


class Chamado(BaseModel):
    __tablename__ = "chamados"

    usuario_id: Mapped[int] = mapped_column(
        ForeignKey("usuarios.id"), nullable=False, index=True
    )
    texto: Mapped[str] = mapped_column(Text, nullable=False)
    estado: Mapped[ChamadoEstado] = mapped_column(
        EnumType(
            ChamadoEstado,
            name="chamado_estado",
            native_enum=False,
            create_constraint=True,
            length=1,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=ChamadoEstado.ABERTO,
    )
    url_imagem: Mapped[Optional[str]] = mapped_column(
        String(2048),
        nullable=True,
        comment="Absolute public URL of the attached image, if any.",
    )

    def __repr__(self) -> str:
        return f"<Chamado(id={self.id}, estado='{self.estado.value}')>"

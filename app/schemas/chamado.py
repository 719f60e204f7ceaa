"""Pydantic schemas for chamados."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.models.chamado import ChamadoEstado


class ChamadoResponse(BaseModel):
    """Pydantic model for serializing SQLAlchemy Chamado objects."""

    id: int
    usuario_id: int
    texto: str
    estado: ChamadoEstado
    url_imagem: Optional[str] = None
    data_criacao: datetime
    data_atualizacao: datetime

    model_config = ConfigDict(from_attributes=True)

"""Pydantic schemas for posts."""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from app.models.post import POST_TEXTO_MAX

PostTexto = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=POST_TEXTO_MAX),
]
UsuarioId = Annotated[int, Field(gt=0)]


class PostCreate(BaseModel):
    """Body of POST and PUT: every mutable field is required."""

    usuario_id: UsuarioId
    texto: PostTexto


class PostUpdate(BaseModel):
    """Body of PATCH: any subset of the mutable fields."""

    usuario_id: Optional[UsuarioId] = None
    texto: Optional[PostTexto] = None


class PostResponse(BaseModel):
    id: int
    usuario_id: int
    texto: str
    data_criacao: datetime
    data_atualizacao: datetime

    model_config = ConfigDict(from_attributes=True)

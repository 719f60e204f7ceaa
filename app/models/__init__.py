"""Exports all models for easy access."""

from .base import Base, BaseModel
from .chamado import Chamado, ChamadoEstado
from .post import POST_TEXTO_MAX, Post
from .usuario import Papel, Usuario

__all__ = [
    "Base",
    "BaseModel",
    "Usuario",
    "Papel",
    "Chamado",
    "ChamadoEstado",
    "Post",
    "POST_TEXTO_MAX",
]

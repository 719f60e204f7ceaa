"""Post model for short user messages."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel

POST_TEXTO_MAX = 280


class Post(BaseModel):
    __tablename__ = "posts"

    usuario_id: Mapped[int] = mapped_column(
        ForeignKey("usuarios.id"), nullable=False, index=True
    )
    texto: Mapped[str] = mapped_column(String(POST_TEXTO_MAX), nullable=False)

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, usuario_id={self.usuario_id})>"

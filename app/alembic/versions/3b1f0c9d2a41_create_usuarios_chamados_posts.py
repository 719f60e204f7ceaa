"""create usuarios, chamados and posts tables

Revision ID: 3b1f0c9d2a41
Revises:
Create Date: 2026-10-19 10:12:44.318205

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b1f0c9d2a41"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "data_criacao",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
            comment="The time the record was created.",
        ),
        sa.Column(
            "data_atualizacao",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
            comment="The time the record was last updated.",
        ),
    ]


def upgrade() -> None:
    """Creates the usuarios, chamados and posts tables."""
    op.create_table(
        "usuarios",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nome", sa.String(length=120), nullable=False),
        sa.Column(
            "email",
            sa.String(length=255),
            nullable=False,
            comment="Stored trimmed and lower-cased.",
        ),
        sa.Column("senha_hash", sa.String(length=255), nullable=False),
        sa.Column("papel", sa.SmallInteger(), server_default="0", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "chamados",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("usuario_id", sa.Integer(), nullable=False),
        sa.Column("texto", sa.Text(), nullable=False),
        sa.Column("estado", sa.String(length=1), nullable=False),
        sa.Column(
            "url_imagem",
            sa.String(length=2048),
            nullable=True,
            comment="Absolute public URL of the attached image, if any.",
        ),
        *_timestamps(),
        sa.CheckConstraint("estado IN ('a', 'f')", name="chamado_estado"),
        sa.ForeignKeyConstraint(["usuario_id"], ["usuarios.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_chamados_usuario_id", "chamados", ["usuario_id"])

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("usuario_id", sa.Integer(), nullable=False),
        sa.Column("texto", sa.String(length=280), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["usuario_id"], ["usuarios.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_posts_usuario_id", "posts", ["usuario_id"])


def downgrade() -> None:
    """Drops the tables created by this revision."""
    op.drop_index("ix_posts_usuario_id", table_name="posts")
    op.drop_table("posts")
    op.drop_index("ix_chamados_usuario_id", table_name="chamados")
    op.drop_table("chamados")
    op.drop_table("usuarios")

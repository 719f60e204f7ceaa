"""API endpoints for posts."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session
from app.models.post import Post
from app.schemas.post import PostCreate, PostResponse, PostUpdate
from app.utils.db_errors import raise_for_integrity_error
from app.utils.logging_config import logger

router = APIRouter()

NOT_FOUND = "não encontrado"
FK_DETAIL = "usuario_id não existe (violação de chave estrangeira)"

PostId = Annotated[int, Path(gt=0, description="Identifier of the post.")]
UsuarioId = Annotated[int, Path(gt=0, description="Identifier of the author.")]


async def _write(db: AsyncSession, statement) -> Optional[Post]:
    """
    Runs one INSERT/UPDATE ... RETURNING statement and commits it.
    Returns None when no row matched.
    """
    try:
        post = await db.scalar(statement)
        await db.commit()
        if post is not None:
            await db.refresh(post)
    except IntegrityError as e:
        await db.rollback()
        raise_for_integrity_error(e, foreign_key_detail=FK_DETAIL)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to write post: {e}", exc_info=True)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "erro interno") from e
    return post


@router.get("", response_model=list[PostResponse])
async def list_posts(db: AsyncSession = Depends(get_db_session)):
    result = await db.execute(select(Post).order_by(Post.id.desc()))
    return result.scalars().all()


@router.get("/usuario/{usuario_id}", response_model=list[PostResponse])
async def list_posts_by_usuario(
    usuario_id: UsuarioId, db: AsyncSession = Depends(get_db_session)
):
    """
    Timeline of one user, newest first.
    """
    result = await db.execute(
        select(Post).where(Post.usuario_id == usuario_id).order_by(Post.id.desc())
    )
    return result.scalars().all()


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: PostId, db: AsyncSession = Depends(get_db_session)):
    post = await db.get(Post, post_id)
    if post is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, NOT_FOUND)
    return post


@router.post("", status_code=201, response_model=PostResponse)
async def create_post(body: PostCreate, db: AsyncSession = Depends(get_db_session)):
    statement = (
        insert(Post)
        .values(usuario_id=body.usuario_id, texto=body.texto)
        .returning(Post)
    )
    return await _write(db, statement)


@router.put("/{post_id}", response_model=PostResponse)
async def replace_post(
    post_id: PostId, body: PostCreate, db: AsyncSession = Depends(get_db_session)
):
    """
    Replaces every mutable field of the post.
    """
    statement = (
        update(Post)
        .where(Post.id == post_id)
        .values(usuario_id=body.usuario_id, texto=body.texto, data_atualizacao=func.now())
        .returning(Post)
    )
    post = await _write(db, statement)
    if post is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, NOT_FOUND)
    return post


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: PostId, body: PostUpdate, db: AsyncSession = Depends(get_db_session)
):
    """
    Updates only the fields present in the body.
    """
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, "envie ao menos um campo para atualizar"
        )
    if any(value is None for value in changes.values()):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "campos não podem ser nulos")

    statement = (
        update(Post)
        .where(Post.id == post_id)
        .values(**changes, data_atualizacao=func.now())
        .returning(Post)
    )
    post = await _write(db, statement)
    if post is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, NOT_FOUND)
    return post


@router.delete("/{post_id}", status_code=204)
async def delete_post(post_id: PostId, db: AsyncSession = Depends(get_db_session)) -> None:
    try:
        result = await db.execute(
            delete(Post).where(Post.id == post_id).returning(Post.id)
        )
        deleted = result.scalar_one_or_none()
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to delete post: {e}", exc_info=True)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "erro interno") from e
    if deleted is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, NOT_FOUND)

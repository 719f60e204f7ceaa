"""API endpoints for chamados (support tickets)."""

import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import ObjectDeletedError, StaleDataError
from starlette.datastructures import UploadFile

from app.api.deps import get_current_user, get_db_session
from app.models.chamado import Chamado, ChamadoEstado
from app.models.usuario import Usuario
from app.schemas.chamado import ChamadoResponse
from app.services.uploads import remove_upload_by_url, save_upload
from app.utils.db_errors import raise_for_integrity_error
from app.utils.logging_config import logger

router = APIRouter()

IMAGE_FIELD = "imagem"
NOT_FOUND = "não encontrado"
ESTADOS_VALIDOS = {estado.value for estado in ChamadoEstado}


def parse_id_param(value: str) -> int:
    """Accepts only positive integers; anything else is a 400."""
    try:
        chamado_id = int(value)
    except ValueError:
        chamado_id = 0
    if chamado_id <= 0:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "id inválido")
    return chamado_id


def is_texto_valido(texto: Any) -> bool:
    return isinstance(texto, str) and texto.strip() != ""


def is_estado_valido(estado: Any) -> bool:
    return isinstance(estado, str) and estado in ESTADOS_VALIDOS


async def read_payload(request: Request) -> tuple[dict[str, Any], Optional[UploadFile]]:
    """
    Reads the request body as multipart/urlencoded form or JSON.

    In forms, an empty or "null" url_imagem stands for JSON null.

    Returns:
        The plain fields and the uploaded image, if any.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        fields: dict[str, Any] = {}
        image: Optional[UploadFile] = None
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == IMAGE_FIELD and value.filename:
                    image = value
                continue
            fields[key] = value
        if fields.get("url_imagem") in ("", "null"):
            fields["url_imagem"] = None
        return fields, image

    body = await request.body()
    if not body:
        return {}, None
    try:
        data = json.loads(body)
    except ValueError:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "JSON inválido") from None
    if not isinstance(data, dict):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "corpo deve ser um objeto JSON")
    return data, None


async def get_owned_chamado(
    db: AsyncSession, chamado_id: int, current_user: Usuario
) -> Chamado:
    """
    Loads a chamado the caller may change. Tickets of other users are
    reported as missing unless the caller is an administrator.
    """
    chamado = await db.get(Chamado, chamado_id)
    if chamado is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, NOT_FOUND)
    if not current_user.is_admin and chamado.usuario_id != current_user.id:
        raise HTTPException(status.HTTP_404_NOT_FOUND, NOT_FOUND)
    return chamado


def _internal_error(action: str, error: Exception) -> HTTPException:
    logger.error(f"Failed to {action}: {error}", exc_info=True)
    return HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "erro interno")


@router.get("", response_model=list[ChamadoResponse])
async def list_chamados(db: AsyncSession = Depends(get_db_session)):
    """
    Lists every chamado, newest first.
    """
    try:
        result = await db.execute(select(Chamado).order_by(Chamado.id.desc()))
    except SQLAlchemyError as e:
        raise _internal_error("list chamados", e) from e
    return result.scalars().all()


@router.get("/{chamado_id}", response_model=ChamadoResponse)
async def get_chamado(chamado_id: str, db: AsyncSession = Depends(get_db_session)):
    cid = parse_id_param(chamado_id)
    try:
        chamado = await db.get(Chamado, cid)
    except SQLAlchemyError as e:
        raise _internal_error("load chamado", e) from e
    if chamado is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, NOT_FOUND)
    return chamado


@router.post("", status_code=201, response_model=ChamadoResponse)
async def create_chamado(
    request: Request,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Creates a chamado owned by the caller. `estado` defaults to "a".
    The image is written before the insert and removed again if it fails.
    """
    fields, image = await read_payload(request)
    texto = fields.get("texto")
    estado = fields.get("estado")
    if estado is None:
        estado = ChamadoEstado.ABERTO.value

    if not is_texto_valido(texto) or not is_estado_valido(estado):
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            "Campos obrigatórios: texto (string não vazia) e estado ('a' ou 'f'; se ausente, assume 'a')",
        )

    url_imagem = await save_upload(request, image)
    chamado = Chamado(
        usuario_id=current_user.id,
        texto=texto.strip(),
        estado=ChamadoEstado(estado),
        url_imagem=url_imagem,
    )
    db.add(chamado)
    try:
        await db.commit()
        await db.refresh(chamado)
    except IntegrityError as e:
        await db.rollback()
        remove_upload_by_url(url_imagem)
        raise_for_integrity_error(e, foreign_key_detail="usuário do chamado não existe")
    except SQLAlchemyError as e:
        await db.rollback()
        remove_upload_by_url(url_imagem)
        raise _internal_error("create chamado", e) from e

    logger.info(f"Chamado created: id={chamado.id} usuario_id={chamado.usuario_id}")
    return chamado


async def _apply_update(
    db: AsyncSession,
    chamado: Chamado,
    texto: str,
    estado: str,
    url_imagem: Optional[str],
) -> bool:
    """
    Writes the final values with a single UPDATE. Returns False when the row
    disappeared since it was loaded.
    """
    chamado.texto = texto
    chamado.estado = ChamadoEstado(estado)
    chamado.url_imagem = url_imagem
    chamado.data_atualizacao = func.now()
    try:
        await db.commit()
        await db.refresh(chamado)
    except (StaleDataError, ObjectDeletedError):
        await db.rollback()
        return False
    except IntegrityError as e:
        await db.rollback()
        raise_for_integrity_error(e)
    except SQLAlchemyError:
        await db.rollback()
        raise
    return True


@router.put("/{chamado_id}", response_model=ChamadoResponse)
async def replace_chamado(
    chamado_id: str,
    request: Request,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Full update: texto and estado are required, the image is optional.
    A new image replaces the old file; without one the current image is kept.
    """
    cid = parse_id_param(chamado_id)
    fields, image = await read_payload(request)
    texto = fields.get("texto")
    estado = fields.get("estado")

    if not is_texto_valido(texto) or not is_estado_valido(estado):
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            "Para PUT, envie texto (string não vazia) e estado ('a' | 'f'); imagem é opcional.",
        )

    chamado = await get_owned_chamado(db, cid, current_user)
    url_imagem_antiga = chamado.url_imagem
    url_imagem_nova = None

    try:
        if image is not None:
            url_imagem_nova = await save_upload(request, image)
        url_final = url_imagem_nova or url_imagem_antiga

        if not await _apply_update(db, chamado, texto.strip(), estado, url_final):
            raise HTTPException(status.HTTP_404_NOT_FOUND, NOT_FOUND)
    except HTTPException:
        remove_upload_by_url(url_imagem_nova)
        raise
    except SQLAlchemyError as e:
        remove_upload_by_url(url_imagem_nova)
        raise _internal_error("update chamado", e) from e

    if url_imagem_nova and url_imagem_antiga and url_imagem_antiga != url_imagem_nova:
        remove_upload_by_url(url_imagem_antiga)

    return chamado


@router.patch("/{chamado_id}", response_model=ChamadoResponse)
async def update_chamado(
    chamado_id: str,
    request: Request,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Partial update of texto, estado and/or image.

    Image rules: a new file replaces the current one, an explicit
    `url_imagem: null` removes it, and leaving both out keeps it.
    """
    cid = parse_id_param(chamado_id)
    fields, image = await read_payload(request)

    quer_texto = "texto" in fields
    quer_estado = "estado" in fields
    remover_imagem = "url_imagem" in fields and fields["url_imagem"] is None
    quer_imagem = image is not None or remover_imagem

    if not quer_texto and not quer_estado and not quer_imagem:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, "envie ao menos um campo para atualizar"
        )
    if quer_texto and not is_texto_valido(fields["texto"]):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "texto deve ser string não vazia")
    if quer_estado and not is_estado_valido(fields["estado"]):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "estado deve ser 'a' ou 'f'")
    if "url_imagem" in fields and fields["url_imagem"] is not None:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            "Para alterar imagem via PATCH, envie um arquivo em 'imagem' ou url_imagem = null para remover.",
        )

    chamado = await get_owned_chamado(db, cid, current_user)
    url_imagem_antiga = chamado.url_imagem
    url_imagem_nova = None

    try:
        if image is not None:
            url_imagem_nova = await save_upload(request, image)
            url_final = url_imagem_nova
        elif remover_imagem:
            url_final = None
        else:
            url_final = url_imagem_antiga

        texto_final = fields["texto"].strip() if quer_texto else chamado.texto
        estado_final = fields["estado"] if quer_estado else chamado.estado.value

        if not await _apply_update(db, chamado, texto_final, estado_final, url_final):
            raise HTTPException(status.HTTP_404_NOT_FOUND, NOT_FOUND)
    except HTTPException:
        remove_upload_by_url(url_imagem_nova)
        raise
    except SQLAlchemyError as e:
        remove_upload_by_url(url_imagem_nova)
        raise _internal_error("update chamado", e) from e

    if url_imagem_antiga and url_imagem_antiga != url_final:
        remove_upload_by_url(url_imagem_antiga)

    return chamado


@router.delete("/{chamado_id}", status_code=204)
async def delete_chamado(
    chamado_id: str,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> None:
    """
    Deletes the chamado, then makes a best-effort attempt to remove its image.
    """
    cid = parse_id_param(chamado_id)
    chamado = await get_owned_chamado(db, cid, current_user)
    url_imagem = chamado.url_imagem

    try:
        await db.delete(chamado)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise _internal_error("delete chamado", e) from e

    remove_upload_by_url(url_imagem)
    logger.info(f"Chamado deleted: id={cid}")

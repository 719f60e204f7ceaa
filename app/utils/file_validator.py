"""File validation utilities."""

from typing import Optional

from fastapi import HTTPException

# content-type -> (magic prefix, default extension)
ALLOWED_IMAGE_TYPES = {
    "image/png": (b"\x89PNG\r\n\x1a\n", ".png"),
    "image/jpeg": (b"\xff\xd8\xff", ".jpg"),
    "image/gif": (b"GIF8", ".gif"),
    "image/webp": (b"RIFF", ".webp"),
}


def detect_image_type(content: bytes) -> Optional[str]:
    """Returns the image content-type matching the magic bytes, if any."""
    for content_type, (magic, _) in ALLOWED_IMAGE_TYPES.items():
        if content.startswith(magic):
            if content_type == "image/webp" and content[8:12] != b"WEBP":
                continue
            return content_type
    return None


def validate_image(content: bytes, content_type: Optional[str]) -> str:
    """
    Validates that an uploaded file is one of the accepted image formats.

    Args:
        content: The raw bytes of the uploaded file.
        content_type: The content-type declared by the client.

    Returns:
        The default file extension for the detected image type.

    Raises:
        HTTPException: If the file is not an accepted image.
    """
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Tipo de arquivo inválido. Envie uma imagem PNG, JPEG, GIF ou WEBP.",
        )

    detected = detect_image_type(content)
    if detected is None:
        raise HTTPException(
            status_code=400,
            detail="Conteúdo do arquivo não parece ser uma imagem válida.",
        )

    return ALLOWED_IMAGE_TYPES[detected][1]

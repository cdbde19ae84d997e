"""
Thumbnail — controller layer.

Receives raw form input from the router, validates it, calls the service
and turns codec failures into the processing-error response.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import Response

from thumbnailer.codec.errors import CodecError
from thumbnailer.exceptions import (
    FileTooLarge,
    NoFileProvided,
    ThumbnailGenerationFailed,
    UnsupportedFileType,
)
from thumbnailer.thumbnail import service
from thumbnailer.thumbnail.constants import SUPPORTED_CONTENT_TYPES
from thumbnailer.thumbnail.schemas import ThumbnailRequest

if TYPE_CHECKING:
    from fastapi import UploadFile

    from thumbnailer.codec.session import CodecSession
    from thumbnailer.config import Settings

logger = logging.getLogger(__name__)


async def create_thumbnail(
    file: UploadFile | None,
    width: str | None,
    height: str | None,
    settings: Settings,
    codec: CodecSession,
) -> Response:
    if file is None:
        raise NoFileProvided()

    content_type = service.normalize_content_type(file.content_type)
    if not service.is_supported_content_type(content_type):
        raise UnsupportedFileType(SUPPORTED_CONTENT_TYPES)

    if file.size is not None and file.size > settings.max_upload_bytes:
        raise FileTooLarge(settings.max_upload_bytes)

    resolved_width = service.resolve_dimension(width, settings.default_width, settings.max_dimension)
    resolved_height = service.resolve_dimension(height, settings.default_height, settings.max_dimension)

    logger.info("Processing %s file: %s", content_type, file.filename)
    logger.info("Generating thumbnail with dimensions: %dx%d", resolved_width, resolved_height)

    data = await file.read()
    if len(data) > settings.max_upload_bytes:
        raise FileTooLarge(settings.max_upload_bytes)

    request = ThumbnailRequest(
        filename=file.filename or "",
        content_type=content_type,
        data=data,
        width=resolved_width,
        height=resolved_height,
    )
    try:
        result = await service.generate_thumbnail(codec, request, settings)
    except CodecError as exc:
        logger.exception("Error generating thumbnail for %s", file.filename)
        raise ThumbnailGenerationFailed(str(exc)) from exc

    return Response(
        content=result.data,
        media_type="image/jpeg",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )

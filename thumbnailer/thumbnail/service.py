"""
Thumbnail — pure business logic.

Zero FastAPI imports. Receives the request model and codec session via
parameters; raises ``CodecError`` subclasses on failure.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from thumbnailer.codec.commands import image_thumbnail_args, video_thumbnail_args
from thumbnailer.codec.errors import CodecExecutionError, CodecOutputMissing
from thumbnailer.thumbnail.constants import (
    FALLBACK_EXTENSION,
    LEADING_INTEGER,
    NO_FRAME_MARKERS,
    SAFE_EXTENSION,
    SUPPORTED_CONTENT_TYPES,
    MediaKind,
)
from thumbnailer.thumbnail.schemas import ThumbnailRequest, ThumbnailResult

if TYPE_CHECKING:
    from thumbnailer.codec.session import Artifacts, CodecSession
    from thumbnailer.config import Settings

logger = logging.getLogger(__name__)


def normalize_content_type(content_type: str | None) -> str:
    """``"Image/PNG; charset=x"`` → ``"image/png"``."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def is_supported_content_type(content_type: str) -> bool:
    return content_type in SUPPORTED_CONTENT_TYPES


def input_extension(filename: str | None) -> str:
    """Lower-cased extension of the upload name, or ``bin`` when absent or unsafe."""
    if not filename or "." not in filename:
        return FALLBACK_EXTENSION
    ext = filename.rsplit(".", 1)[1].lower()
    return ext if SAFE_EXTENSION.fullmatch(ext) else FALLBACK_EXTENSION


def resolve_dimension(raw: object, default: int, maximum: int) -> int:
    """Leading integer of a form value; missing, non-numeric or non-positive gives ``default``."""
    if not isinstance(raw, str):
        return default
    match = LEADING_INTEGER.match(raw)
    if match is None:
        return default
    value = int(match.group(1))
    if value <= 0:
        return default
    return min(value, maximum)


def _seek_found_no_frame(exc: CodecExecutionError) -> bool:
    return any(marker in exc.stderr for marker in NO_FRAME_MARKERS)


async def _grab_video_frame(
    codec: CodecSession,
    staged: Artifacts,
    request: ThumbnailRequest,
    settings: Settings,
) -> bytes | None:
    seek = settings.video_seek_seconds
    if seek:
        try:
            await codec.execute(video_thumbnail_args(
                staged.input.name, staged.output.name,
                request.width, request.height,
                settings.jpeg_quality, seek,
            ))
        except CodecExecutionError as exc:
            # Some ffmpeg releases fail instead of writing an empty file when
            # the seek lands past the end. Decode errors are final.
            if not _seek_found_no_frame(exc):
                raise
            reason = str(exc)
        else:
            data = await codec.read_artifact(staged.output)
            if data:
                return data
            reason = "empty output"
        # Clip shorter than the seek offset: fall back to its first frame.
        logger.info("No frame at %gs in %s (%s), using first frame", seek, request.filename, reason)

    await codec.execute(video_thumbnail_args(
        staged.input.name, staged.output.name,
        request.width, request.height,
        settings.jpeg_quality, None,
    ))
    return await codec.read_artifact(staged.output)


async def generate_thumbnail(
    codec: CodecSession,
    request: ThumbnailRequest,
    settings: Settings,
) -> ThumbnailResult:
    """Fit the upload into ``width``×``height`` and encode it as one JPEG frame."""
    await codec.ensure_ready()

    async with codec.artifacts(input_extension(request.filename)) as staged:
        await codec.write_artifact(staged.input, request.data)

        if request.kind is MediaKind.VIDEO:
            data = await _grab_video_frame(codec, staged, request, settings)
        else:
            await codec.execute(image_thumbnail_args(
                staged.input.name, staged.output.name,
                request.width, request.height,
                settings.jpeg_quality,
            ))
            data = await codec.read_artifact(staged.output)

    if not data:
        raise CodecOutputMissing()
    return ThumbnailResult(data=data, width=request.width, height=request.height)

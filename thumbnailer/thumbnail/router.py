"""
Thumbnail — HTTP routes.

Single endpoint at the server root: POST an upload, get a JPEG back.
"""
from fastapi import APIRouter, Depends, File, Request, Response, UploadFile, status

from thumbnailer.codec.session import CodecSession, get_codec_session
from thumbnailer.config import Settings, get_settings
from thumbnailer.rate_limit import limiter, upload_rate_limit
from thumbnailer.thumbnail import controller
from thumbnailer.thumbnail.constants import PREFLIGHT_HEADERS
from thumbnailer.thumbnail.schemas import (
    ErrorResponse,
    FileTooLargeResponse,
    ProcessingErrorResponse,
    UnsupportedTypeResponse,
)

router = APIRouter(tags=["thumbnail"])


def _text_field(name: str):
    """Dependency returning a text form field, or ``None`` when absent or sent as a file part."""

    async def read(request: Request) -> str | None:
        value = (await request.form()).get(name)
        return value if isinstance(value, str) else None

    return read


@router.options(
    "/",
    status_code=status.HTTP_200_OK,
    summary="CORS preflight",
    response_class=Response,
)
async def preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK, headers=PREFLIGHT_HEADERS)


@router.post(
    "/",
    summary="Generate a JPEG thumbnail",
    description=(
        "Accepts multipart/form-data with a `file` upload (image or video) and "
        "optional `width`/`height` (default 180). Images are scaled to fit and "
        "padded with black to exactly width×height; videos use the frame at 1s."
    ),
    response_class=Response,
    responses={
        200: {"content": {"image/jpeg": {}}, "description": "The thumbnail."},
        400: {"model": UnsupportedTypeResponse, "description": "Missing file or unsupported type."},
        413: {"model": FileTooLargeResponse},
        429: {"model": ErrorResponse},
        500: {"model": ProcessingErrorResponse},
    },
)
@limiter.limit(upload_rate_limit)
async def create_thumbnail(
    request: Request,
    file: UploadFile | None = File(default=None, description="Image or video to thumbnail"),
    width: str | None = Depends(_text_field("width")),
    height: str | None = Depends(_text_field("height")),
    settings: Settings = Depends(get_settings),
    codec: CodecSession = Depends(get_codec_session),
) -> Response:
    return await controller.create_thumbnail(file, width, height, settings, codec)

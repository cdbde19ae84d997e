"""
Thumbnail — Pydantic V2 models.

``ThumbnailRequest``/``ThumbnailResult`` travel between controller and
service; the response models exist to document error bodies in OpenAPI.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from thumbnailer.thumbnail.constants import MediaKind


# ── Internal ─────────────────────────────────────────────────────────────────

class ThumbnailRequest(BaseModel):
    """One uploaded file plus the box to fit it into."""
    model_config = ConfigDict(frozen=True)

    filename: str = ""
    content_type: str
    data: bytes = Field(repr=False)
    width: int = Field(gt=0)
    height: int = Field(gt=0)

    @property
    def kind(self) -> MediaKind:
        return MediaKind.VIDEO if self.content_type.startswith("video/") else MediaKind.IMAGE


class ThumbnailResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    width: int
    height: int

    @property
    def filename(self) -> str:
        return f"thumbnail_{self.width}x{self.height}.jpg"


# ── Responses ────────────────────────────────────────────────────────────────

class ErrorResponse(BaseModel):
    error: str


class UnsupportedTypeResponse(BaseModel):
    error: str
    supportedTypes: list[str]


class FileTooLargeResponse(BaseModel):
    error: str
    maxBytes: int


class ProcessingErrorResponse(BaseModel):
    error: str
    details: str


class HealthResponse(BaseModel):
    status: str
    service: str
    codec: str

"""
Thumbnail service — domain-specific HTTP exceptions.

All exceptions use preset status codes and JSON bodies so that callers never
need to specify these at the call site.  The handlers registered in
``thumbnailer.middleware.error_handler`` render ``detail`` as the response body.
"""
from fastapi import HTTPException, status


# ── Client input ─────────────────────────────────────────────────────────────

class NoFileProvided(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "No file provided"},
        )


class UnsupportedFileType(HTTPException):
    def __init__(self, supported_types: list[str]) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Unsupported file type", "supportedTypes": supported_types},
        )


class InvalidRequest(HTTPException):
    def __init__(self, details: object = None) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Invalid request", "details": details},
        )


class FileTooLarge(HTTPException):
    def __init__(self, max_bytes: int) -> None:
        super().__init__(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail={"error": "File too large", "maxBytes": max_bytes},
        )


# ── Processing ───────────────────────────────────────────────────────────────

class ThumbnailGenerationFailed(HTTPException):
    """Any codec-side failure. Carries the underlying message for diagnostics."""

    def __init__(self, details: str) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to generate thumbnail", "details": details},
        )

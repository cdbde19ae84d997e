import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI

from thumbnailer.codec.session import CodecSession, get_codec_session, shutdown_codec_session
from thumbnailer.config import get_settings
from thumbnailer.middleware import (
    RequestIdFilter,
    allow_any_origin_middleware,
    error_envelope_middleware,
    register_exception_handlers,
    request_id_middleware,
)
from thumbnailer.rate_limit import limiter
from thumbnailer.thumbnail.router import router as thumbnail_router
from thumbnailer.thumbnail.schemas import HealthResponse

logger = logging.getLogger(__name__)


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## Thumbnail Generator

Upload an image or a video, get back a JPEG thumbnail.

* **Images** (jpeg, png, gif, webp) are scaled to fit the requested box and
  padded with black to its exact size.
* **Videos** (mp4, avi, mov, wmv, flv, webm) contribute the frame at the 1 second
  mark, scaled and padded the same way.
* Box defaults to 180x180; pass `width` / `height` form fields to change it.

Decoding and encoding are done by ffmpeg, started lazily on the first request.

### Error shape
```json
{ "error": "Human-readable message", "details": "optional diagnostics" }
```
"""

_LOG_FORMAT = "%(levelname)s:%(name)s:[%(request_id)s] %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await shutdown_codec_session()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Thumbnail Generator",
        version="1.0.0",
        description=_DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    register_exception_handlers(app)

    # Middleware (applied in reverse-registration order: last added = outermost)
    app.middleware("http")(error_envelope_middleware)
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(allow_any_origin_middleware)

    app.include_router(thumbnail_router)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health(codec: CodecSession = Depends(get_codec_session)) -> HealthResponse:
        return HealthResponse(status="ok", service="thumbnail", codec=codec.state.value)

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    logger.info("Thumbnail generator listening on http://%s:%d", settings.host, settings.port)
    logger.info("Usage: POST multipart/form-data with a 'file' field to /")
    logger.info(
        "Optional: 'width' and 'height' fields (default: %dx%d)",
        settings.default_width, settings.default_height,
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())

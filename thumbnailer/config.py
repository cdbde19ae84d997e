from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_files() -> list[str]:
    """Load .env from the project root, then a local .env in the working directory."""
    base = Path(__file__).resolve().parent.parent  # project root
    return [str(base / ".env"), ".env"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Server ───────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # ── Thumbnail box ────────────────────────────────────────────────────────
    default_width: int = Field(default=180, gt=0)
    default_height: int = Field(default=180, gt=0)
    max_dimension: int = Field(default=4096, gt=0)

    # ffmpeg -q:v scale: 2 is the best JPEG quantization, 31 the worst
    jpeg_quality: int = Field(default=2, ge=2, le=31)
    video_seek_seconds: float = Field(default=1.0, ge=0)

    # ── Codec engine ─────────────────────────────────────────────────────────
    ffmpeg_path: str = ""
    codec_download_url: str = ""
    codec_cache_dir: str = "~/.cache/thumbnailer"
    workspace_dir: str = ""
    transcode_timeout_seconds: float = Field(default=60.0, gt=0)
    max_concurrent_transcodes: int = Field(default=1, ge=1)

    # ── Uploads ──────────────────────────────────────────────────────────────
    max_upload_bytes: int = 200 * 1024 * 1024  # 200 MB

    # ── Rate limiting ────────────────────────────────────────────────────────
    rate_limit: str = "60/minute"
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"

    @property
    def codec_cache_path(self) -> Path:
        return Path(self.codec_cache_dir).expanduser()


@lru_cache
def get_settings() -> Settings:
    return Settings()

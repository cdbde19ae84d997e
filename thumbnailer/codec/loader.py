"""
Codec executable resolution.

Lookup order, first hit wins:
  1. ``ffmpeg_path`` setting (explicit override).
  2. ``ffmpeg`` on PATH.
  3. A copy previously downloaded into ``codec_cache_dir``.
  4. One-time download from ``codec_download_url`` into ``codec_cache_dir``.
"""
from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path

import httpx

from thumbnailer.codec.errors import CodecUnavailable
from thumbnailer.config import Settings

logger = logging.getLogger(__name__)

CODEC_EXECUTABLE = "ffmpeg"
_DOWNLOAD_TIMEOUT = httpx.Timeout(30.0, read=300.0)


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


async def locate_codec_binary(settings: Settings) -> Path:
    """Return the path of a runnable codec executable, fetching it if needed."""
    if settings.ffmpeg_path:
        explicit = Path(settings.ffmpeg_path).expanduser()
        if not _is_executable(explicit):
            raise CodecUnavailable(f"configured codec executable is not runnable: {explicit}")
        return explicit

    found = shutil.which(CODEC_EXECUTABLE)
    if found:
        return Path(found)

    cached = settings.codec_cache_path / CODEC_EXECUTABLE
    if _is_executable(cached):
        logger.info("Using cached codec executable %s", cached)
        return cached

    if settings.codec_download_url:
        return await download_codec_binary(settings.codec_download_url, cached)

    raise CodecUnavailable(
        "ffmpeg executable not found: set FFMPEG_PATH, install ffmpeg on PATH, "
        "or configure CODEC_DOWNLOAD_URL"
    )


async def download_codec_binary(url: str, destination: Path) -> Path:
    """Stream the executable from ``url`` to ``destination`` and mark it runnable.

    The payload lands in a temporary file next to the destination first, so a
    partial download never shadows a good one.
    """
    logger.info("Fetching codec executable from %s", url)
    tmp_path: Path | None = None
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".download-", dir=destination.parent)
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, "wb") as fh:
            async with httpx.AsyncClient(timeout=_DOWNLOAD_TIMEOUT, follow_redirects=True) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    async for chunk in response.aiter_bytes():
                        fh.write(chunk)
        tmp_path.chmod(tmp_path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        tmp_path.replace(destination)
    except (httpx.HTTPError, OSError) as exc:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise CodecUnavailable(f"could not fetch codec executable from {url}: {exc}") from exc

    logger.info("Codec executable stored at %s", destination)
    return destination

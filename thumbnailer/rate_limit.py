"""
Global slowapi rate limiter.

Storage defaults to in-process memory; point RATE_LIMIT_STORAGE_URI at Redis
when several workers share the limit.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from thumbnailer.config import get_settings

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=_settings.rate_limit_storage_uri,
    enabled=_settings.rate_limit_enabled,
)


def upload_rate_limit() -> str:
    return get_settings().rate_limit

from thumbnailer.middleware.cors import allow_any_origin_middleware
from thumbnailer.middleware.error_handler import error_envelope_middleware, register_exception_handlers
from thumbnailer.middleware.request_id import RequestIdFilter, request_id_middleware

__all__ = [
    "RequestIdFilter",
    "allow_any_origin_middleware",
    "error_envelope_middleware",
    "register_exception_handlers",
    "request_id_middleware",
]

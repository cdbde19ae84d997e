from collections.abc import Awaitable, Callable

from starlette.requests import Request
from starlette.responses import Response


async def allow_any_origin_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Stamp ``Access-Control-Allow-Origin: *`` on every response, errors included.

    Starlette's CORSMiddleware only answers requests that carry an Origin
    header and replies to preflights with a text body, so the permissive
    header is applied here and ``OPTIONS /`` is served by the router.
    """
    response = await call_next(request)
    response.headers["Access-Control-Allow-Origin"] = "*"
    return response

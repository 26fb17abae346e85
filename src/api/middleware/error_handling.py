"""Turn unhandled exceptions into the JSON 500 envelope inside the middleware stack."""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from api.errors import unhandled_exception_handler


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Render route crashes as 500 responses that CORS and security headers still wrap.

    Starlette's own catch-all runs outermost, after CORSMiddleware, so its
    responses carry no CORS headers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return await unhandled_exception_handler(request, e)

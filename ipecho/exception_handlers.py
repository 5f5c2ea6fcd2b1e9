from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ipecho.composer import CORS_HEADERS
from ipecho.logger import logger


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected errors to return a structured 500 response.

    Resolution and metadata problems are handled inside the resolvers, so reaching
    this handler means a programming error. The CORS headers are added here because
    the error response bypasses the application middleware.
    """
    host = request.url.hostname
    logger.exception(
        "Unhandled exception while processing request: "
        f"{repr(exc)} host={host} path={request.url.path} method={request.method}"
    )
    content: dict[str, Any] = {
        "code": "internal_error",
        "message": "An unexpected error occurred while processing the request.",
        "host": host,
    }
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
        headers=dict(CORS_HEADERS),
    )

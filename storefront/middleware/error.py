from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.shared.error_handler import ServiceError
from storefront.shared.exceptions import UpstreamUnavailable
from storefront.shared.utils import get_logger

logger = get_logger(__name__)


def _error_body(status_code: int, message: str) -> dict:
    return {"success": False, "statusCode": status_code, "message": message}


async def http_exception_handler(request: Request, exc: Exception):
    """Global exception handler for HTTP errors."""
    if isinstance(exc, StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.status_code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    if isinstance(exc, UpstreamUnavailable):
        logger.error(f"Cache unavailable on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=_error_body(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "Cache service unavailable, please retry",
            ),
        )

    if isinstance(exc, ServiceError):
        logger.error(f"Service error on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message),
        )

    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
        ),
    )

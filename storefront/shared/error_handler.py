"""
Centralized error handling for service methods that talk to the document store.
"""
from functools import wraps
from typing import Any, Dict, Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from storefront.shared.exceptions import ConflictException, UpstreamUnavailable
from storefront.shared.utils import get_logger


class ServiceError(Exception):
    """Base service error with context"""

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.original_error = original_error
        self.context = context or {}
        super().__init__(self.message)


class StoreError(ServiceError):
    """The document store failed a read or a write."""


class ErrorHandler:
    """Centralized error handler for services"""

    def __init__(self, logger_name: str):
        self.logger = get_logger(logger_name)

    def handle_database_error(
        self, error: Exception, operation: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log a SQLAlchemy failure and re-raise it as an HTTP or store error"""
        context = context or {}

        if isinstance(error, IntegrityError):
            error_msg = str(error.orig) if hasattr(error, "orig") else str(error)
            self.logger.error(
                f"Database integrity error during {operation}: {error_msg}",
                extra=context,
            )
            lowered = error_msg.lower()
            if "unique" in lowered or "duplicate key" in lowered:
                raise ConflictException(
                    detail=f"Resource already exists for {operation}"
                ) from error
            raise StoreError(
                f"Data integrity error during {operation}", error, context
            ) from error

        self.logger.error(f"Database error during {operation}: {error}", extra=context)
        raise StoreError(
            f"Database operation failed for {operation}", error, context
        ) from error

    def log_success(
        self, operation: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.logger.debug(f"Successfully completed {operation}", extra=context or {})


def handle_service_errors(operation: str):
    """Decorator for async service methods.

    SQLAlchemy failures become StoreError (or ConflictException for unique
    violations). HTTP exceptions and cache errors pass through untouched so
    the request boundary can render them.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(self, *args, **kwargs):
            error_handler = getattr(self, "_error_handler", None)
            if not error_handler:
                error_handler = ErrorHandler(self.__class__.__name__)

            try:
                result = await func(self, *args, **kwargs)
            except (HTTPException, UpstreamUnavailable, ServiceError):
                raise
            except SQLAlchemyError as e:
                context = {
                    "method": func.__name__,
                    "function_args": str(args)[:100],
                    "function_kwargs": str(kwargs)[:100],
                }
                error_handler.handle_database_error(e, operation, context)
                raise
            error_handler.log_success(operation)
            return result

        return wrapper

    return decorator

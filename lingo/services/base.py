"""
Base Service.

Base class for services providing common patterns for business logic.
Services orchestrate repositories, translate transport failures into
application errors, and implement business rules.

Usage:
    from lingo.services.base import BaseService

    class NoteSyncService(BaseService):
        def __init__(self, repo: NoteRepository) -> None:
            super().__init__()
            self.repo = repo

        async def list_notes(self, owner_id: str) -> list[Note]:
            return await self._execute_store_operation(
                "list_notes", self.repo.list_by_owner(owner_id), error_cls=FetchError,
            )
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

import httpx

from lingo.core.exceptions import (
    ApplicationError,
    ValidationError,
    WriteError,
)
from lingo.core.logging import get_logger
from lingo.repositories.base import describe_store_error

T = TypeVar("T")

# JSON decoding and pydantic validation errors are ValueError subclasses
_MALFORMED_REPLY_ERRORS = (ValueError, KeyError, TypeError, AttributeError)


class BaseService:
    """
    Base class for all services.

    Provides:
    - Logging context
    - Error wrapping for store operations
    - Common validation patterns
    """

    def __init__(self) -> None:
        self._logger = get_logger(self.__class__.__module__)

    async def _execute_store_operation(
        self,
        operation: str,
        coro: Awaitable[T],
        error_cls: type[ApplicationError] = WriteError,
    ) -> T:
        """
        Execute a store operation with error handling.

        Wraps store calls to convert transport and HTTP exceptions,
        and replies that do not decode into rows, to application-specific
        exceptions. Application errors raised by the repository pass
        through unchanged.

        Args:
            operation: Description of the operation for logging
            coro: Coroutine to execute
            error_cls: Application error raised on failure (FetchError for reads)

        Returns:
            Result of the coroutine

        Raises:
            error_cls: When the store is unreachable or rejects the call
        """
        try:
            return await coro
        except ApplicationError:
            raise
        except httpx.HTTPError as e:
            message = describe_store_error(e)
            self._logger.error(
                "Store error",
                extra={"operation": operation, "error": message},
            )
            raise error_cls(message) from e
        except _MALFORMED_REPLY_ERRORS as e:
            self._logger.error(
                "Malformed store reply",
                extra={"operation": operation, "error": str(e), "error_type": type(e).__name__},
            )
            raise error_cls("Store returned an unexpected response") from e

    def _validate_required(
        self,
        fields: dict[str, Any],
        field_names: list[str],
    ) -> None:
        """
        Validate that required fields are present and not empty.

        Raises:
            ValidationError: If any required field is missing or empty
        """
        missing = []
        for name in field_names:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)

        if missing:
            raise ValidationError(
                "Required fields missing",
                details={"missing_fields": missing},
            )

    def _log_operation(self, operation: str, **context: Any) -> None:
        """Log a service operation with context."""
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(self, message: str, **context: Any) -> None:
        """Log debug information."""
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )

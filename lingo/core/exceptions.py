"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Store and AI failures are translated into these at the client boundary
so callers never handle transport exceptions directly.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a resource cannot be found."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class AuthenticationError(ApplicationError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class FetchError(ApplicationError):
    """Raised when reading from the remote store fails."""

    def __init__(self, message: str = "Could not load data from the store") -> None:
        super().__init__(message, code="STORE_FETCH_ERROR")


class WriteError(ApplicationError):
    """Raised when a create, update or delete against the remote store fails."""

    def __init__(self, message: str = "Could not save changes to the store") -> None:
        super().__init__(message, code="STORE_WRITE_ERROR")


class GenerationError(ApplicationError):
    """Raised when the AI service returns nothing usable."""

    def __init__(self, message: str = "AI generation failed") -> None:
        super().__init__(message, code="AI_GENERATION_ERROR")

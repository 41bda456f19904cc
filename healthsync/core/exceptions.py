"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Referenced account or record does not exist."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class ValidationException(AppException):
    """Malformed input rejected by the validation layer."""

    def __init__(self, message: str = "Validation error", errors: list[str] | None = None):
        """Initialize with 400 status code and the list of violations."""
        self.errors = errors or []
        super().__init__(message, status_code=400)


class PersistenceException(AppException):
    """The document store failed to serve a read or write."""

    def __init__(self, message: str = "Document store operation failed"):
        """Initialize with 500 status code."""
        super().__init__(message, status_code=500)

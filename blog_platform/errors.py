"""
Domain error taxonomy.

Services raise these; ``main.py`` maps them to HTTP responses through a
single exception handler.  Nothing here is retried internally.
"""


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(AppError):
    """Referenced entity is missing or soft-deleted."""

    status_code = 404
    default_message = "Not found"


class AuthorizationError(AppError):
    """Actor is not the author of the entity it tries to mutate."""

    status_code = 403
    default_message = "Forbidden"


class ValidationError(AppError, ValueError):
    """
    Input the domain does not accept.  Also a ``ValueError`` so pydantic
    validators can raise it and report it as a field error.
    """

    status_code = 400
    default_message = "Invalid input"


class StorageError(AppError):
    """The relational store failed; the original exception is chained."""

    status_code = 503
    default_message = "Storage unavailable"

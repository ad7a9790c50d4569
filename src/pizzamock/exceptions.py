"""Custom exceptions for pizzamock package."""


class PizzamockError(Exception):
    """Base exception class for all pizzamock errors.

    Subclasses that describe a mocked HTTP failure carry the ``status`` and
    wire ``message`` the dispatcher turns into an ``{"error": ...}`` body.
    """

    status: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(PizzamockError):
    """Raised when settings or fixture seeds are invalid."""


class BadRequestError(PizzamockError):
    """Raised when a request body is malformed or missing a required field."""

    status = 400
    default_message = "Bad Request"


class UnauthorizedError(PizzamockError):
    """Raised for a missing or stale bearer token, or bad login credentials."""

    status = 401
    default_message = "Unauthorized"


class ForbiddenError(PizzamockError):
    """Raised when a business rule rejects an authenticated caller.

    Distinct from UnauthorizedError: the token is valid, but the caller's
    roles do not permit the action.
    """

    status = 403
    default_message = "Forbidden"


class NotFoundError(PizzamockError):
    """Raised when a path capture references an unknown resource."""

    status = 404
    default_message = "Not Found"


class MethodNotAllowedError(PizzamockError):
    """Raised when a matched route does not support the request method."""

    status = 405
    default_message = "Method Not Allowed"

    def __init__(self, method: str | None = None) -> None:
        super().__init__()
        self.method = method


class ConflictError(PizzamockError):
    """Raised when registration reuses an existing email."""

    status = 409
    default_message = "User already exists"

"""Application error taxonomy.

Every failure raised by the services carries the HTTP status it maps to
and a stable error kind. The API layer renders them into the uniform
error envelope; no other exception type should reach a client.
"""


class AppError(Exception):
    """Base class for all expected application errors."""

    status_code: int = 400
    error: str = "AppError"
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None, *, details: list[dict] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400
    error = "ValidationError"
    default_message = "Validation error"


class ConflictError(AppError):
    """A uniqueness constraint would be violated."""

    status_code = 409
    error = "Conflict"
    default_message = "Resource already exists"


class UnauthenticatedError(AppError):
    """No credential was presented."""

    status_code = 401
    error = "Unauthenticated"
    default_message = "Unauthorized request"


class InvalidCredentialsError(AppError):
    """The presented password does not match."""

    status_code = 401
    error = "InvalidCredentials"
    default_message = "Invalid user credentials"


class InvalidTokenError(AppError):
    """Bad signature, wrong token type, or unknown subject."""

    status_code = 401
    error = "InvalidToken"
    default_message = "Invalid token"


class TokenExpiredError(AppError):
    """Token expired, or refresh token superseded by rotation or revoked."""

    status_code = 401
    error = "TokenExpired"
    default_message = "Token has expired"


class NotFoundError(AppError):
    status_code = 404
    error = "NotFound"
    default_message = "Resource not found"


class UploadError(AppError):
    """The media store rejected or failed the upload."""

    status_code = 500
    error = "UploadError"
    default_message = "File upload failed"


class InternalError(AppError):
    status_code = 500
    error = "InternalError"
    default_message = "An unexpected error occurred"


class SigningError(AppError):
    """Token signing is misconfigured (missing or unusable secret)."""

    status_code = 500
    error = "SigningError"
    default_message = "Token signing is not configured"


AUTHENTICATION_ERRORS = (
    UnauthenticatedError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
)

"""Application exceptions rendered as JSON error bodies by the API layer."""

from __future__ import annotations


class AppException(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, message: str | None = None, error: str | None = None) -> None:
        self.message = message or self.error
        if error:
            self.error = error
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error, "message": self.message}


class BadRequestException(AppException):
    status_code = 400
    error = "Bad request"


class NotFoundException(AppException):
    status_code = 404
    error = "Not found"


class ConflictException(AppException):
    status_code = 409
    error = "Conflict"


class FileUploadException(AppException):
    status_code = 400
    error = "Upload failed"


class AuthenticationException(AppException):
    status_code = 401
    error = "Unauthorized"


class AuthorizationException(AppException):
    status_code = 403
    error = "Forbidden"


class ScanLimitException(AppException):
    status_code = 403
    error = "Scan limit reached"


class LLMServiceException(AppException):
    """Raised when no configured LLM provider could serve a request."""

    status_code = 502
    error = "AI service unavailable"

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")

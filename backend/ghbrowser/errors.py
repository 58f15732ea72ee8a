"""Error taxonomy shared by every layer.

Transport raises these, the data source and repositories propagate them, and
controllers turn them into an ``Error(message)`` state.
"""

from typing import Optional


class AppError(Exception):
    """Base class; ``message`` is safe to show to the user."""

    def __init__(self, message: str = "Unknown error occurred"):
        super().__init__(message)
        self.message = message


class NetworkError(AppError):
    def __init__(self, message: str):
        super().__init__(f"Network error: {message}")
        self.reason = message


class RateLimited(NetworkError):
    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message)


class ValidationFailed(NetworkError):
    def __init__(self, server_message: Optional[str] = None):
        text = f"Validation failed: {server_message}" if server_message else "Validation failed"
        super().__init__(text)
        self.server_message = server_message


class Forbidden(NetworkError):
    def __init__(self, server_message: Optional[str] = None):
        text = (
            f"Forbidden: {server_message}"
            if server_message
            else "Forbidden: Check User-Agent header and request format"
        )
        super().__init__(text)
        self.server_message = server_message


class DecodingError(AppError):
    def __init__(self, message: str):
        super().__init__(f"Decoding error: {message}")
        self.reason = message


class NotFound(AppError):
    def __init__(self):
        super().__init__("Not found")


class Unauthorized(AppError):
    def __init__(self, server_message: Optional[str] = None):
        text = f"Unauthorized: {server_message}" if server_message else "Unauthorized access"
        super().__init__(text)
        self.server_message = server_message


class ServerError(AppError):
    def __init__(self, status_code: int):
        super().__init__(f"Server error: {status_code}")
        self.status_code = status_code


class UnknownError(AppError):
    pass

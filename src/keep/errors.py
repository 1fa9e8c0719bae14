"""Error hierarchy for sync collaborators (network, parsing, vault I/O)."""

from typing import Optional

from shared_types import ErrorKind


class AppError(Exception):
    """Base error carrying a coarse kind for user-facing reporting."""

    def __init__(self, kind: ErrorKind, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.kind = ErrorKind(kind)
        self.message = message
        self.cause = cause


class NetworkError(AppError):
    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(ErrorKind.NETWORK, message, cause)
        self.status = status


class ParseError(AppError):
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(ErrorKind.PARSE, message, cause)


class VaultIOError(AppError):
    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(ErrorKind.IO, message, cause)
        self.path = path


def to_app_error(err: BaseException) -> AppError:
    """Wrap any exception as an AppError, passing AppErrors through."""
    if isinstance(err, AppError):
        return err
    return AppError(ErrorKind.UNKNOWN, str(err) or err.__class__.__name__, err)


def to_user_message(err: BaseException) -> str:
    """Short, user-facing description of an error."""
    app_err = to_app_error(err)
    if isinstance(app_err, NetworkError):
        if app_err.status:
            return f"Network error (status {app_err.status})"
        return "Network error"
    if isinstance(app_err, ParseError):
        return "Failed to parse server response"
    if isinstance(app_err, VaultIOError):
        return f"File error at {app_err.path}" if app_err.path else "File error"
    return app_err.message or "An unexpected error occurred"

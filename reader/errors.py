"""Exception types raised by the reader core.

Every error carries the HTTP status and the API error code it is reported
with, so the HTTP layer can translate it without inspecting messages.
"""


class ReaderError(Exception):
    """Base class for all reader errors."""

    status_code: int = 500
    error_code: int = 9999

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class InvalidRange(ReaderError):
    """A position or length lies outside the book."""

    status_code = 400
    error_code = 400


class ValidationFailed(ReaderError):
    """A request field is missing or malformed."""

    status_code = 400
    error_code = 400


class UnsupportedFormat(ValidationFailed):
    """Uploaded file is not a plain-text book."""

    error_code = 2003


class FileTooLarge(ValidationFailed):
    """Uploaded file exceeds the configured size limit."""

    error_code = 2004


class NotFound(ReaderError):
    """A requested resource does not exist."""

    status_code = 404
    error_code = 404


class BookNotFound(NotFound):
    error_code = 2001


class ChapterNotFound(NotFound):
    pass


class Forbidden(ReaderError):
    """The user may not access or modify the book."""

    status_code = 403
    error_code = 2002


class StorageError(ReaderError):
    """Internal storage failure. The message is never shown to clients."""


class TextNotFound(StorageError):
    """A book's text file is missing from the text store."""

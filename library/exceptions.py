class LibraryError(Exception):
    """Base class for errors surfaced by library operations."""

    status_code = 500

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(LibraryError):
    """Malformed input, rejected before any storage call."""

    status_code = 400


class NotFoundError(LibraryError):
    status_code = 404


class ConflictError(LibraryError):
    """A natural key is already taken."""

    status_code = 409


class StorageError(LibraryError):
    status_code = 500


class ExternalLookupError(LibraryError):
    """Google Books was unreachable or answered with a non-success status.

    Never reaches a view: the Google Books helpers absorb it.
    """

    status_code = 502

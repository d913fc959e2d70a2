class LibraryError(Exception):
    """Base of every error the lending core surfaces to the API layer."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(LibraryError):
    status_code = 404


class Conflict(LibraryError):
    status_code = 409


class PolicyViolation(LibraryError):
    status_code = 422


class StoreFailure(LibraryError):
    """Store kept aborting the transaction; details stay in the log."""

    status_code = 500

    def __init__(self, message: str = "internal error"):
        super().__init__(message)

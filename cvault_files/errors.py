from .models.files import DeleteResult


class FilesError(Exception):
    """Base exception raised when managing user files."""
    pass


class Unauthorized(FilesError):
    """The caller identity is missing or not usable as a namespace."""
    pass


class InvalidPath(FilesError, ValueError):
    """The relative path is malformed or would escape the user namespace."""
    pass


class NotFound(FilesError):
    """The targeted key does not exist in the store."""
    pass


class StoreUnavailable(FilesError):
    """The object store call failed.

    Args:
        message (str): The error message.
        step (str, optional): The store operation that failed, e.g. "list" or "delete".
    """

    def __init__(self, message: str, step: str = None):
        super().__init__(f"{step} failed: {message}" if step else message)
        self.step = step


class PartialDeleteFailure(FilesError):
    """A bulk delete reported that some keys could not be deleted."""

    def __init__(self, result: DeleteResult):
        failed = ", ".join(error.key for error in result.errors[:5])
        more = "..." if len(result.errors) > 5 else ""
        super().__init__(
            f"{len(result.errors)} object(s) under {result.prefix} could not be deleted: {failed}{more}")
        self.result = result

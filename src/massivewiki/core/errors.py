"""Exceptions raised by the wiki core."""


class WikiError(Exception):
    """Base class for wiki errors."""

    status_code = 400


class PageNotFoundError(WikiError):
    """A page or special document does not exist."""

    status_code = 404

    def __init__(self, path: str):
        super().__init__(f"Page not found: {path}")
        self.path = path


class PageExistsError(WikiError):
    """A create or rename target is already taken."""

    def __init__(self, path: str):
        super().__init__(f"A page with this name already exists: {path}")
        self.path = path


class ForbiddenError(WikiError):
    """The operation is not allowed on this page."""


class InvalidNameError(WikiError):
    """A rename target is not made of letters, numbers and hyphens."""

    def __init__(self, name: str):
        super().__init__(
            f"Page name can only contain letters, numbers, and hyphens: {name!r}"
        )
        self.name = name


class StorageError(WikiError):
    """The underlying filesystem operation failed."""

    status_code = 500

"""
Exception taxonomy for linkhop.

Request-scoped errors are turned into HTTP responses by the listeners.
Anything deriving from ProcessFatal ends the process.
"""


class LinkhopError(Exception):
    """Base class for all linkhop errors."""


class NotFound(LinkhopError):
    """Raised when a shortcode has no mapping."""

    def __init__(self, shortcode: str):
        super().__init__(f"no mapping for shortcode {shortcode!r}")
        self.shortcode = shortcode


class DuplicateKey(LinkhopError):
    """Raised when inserting a shortcode that is already mapped."""

    def __init__(self, shortcode: str):
        super().__init__(f"shortcode {shortcode!r} already exists")
        self.shortcode = shortcode


class IOFailure(LinkhopError):
    """Raised when the persistence layer fails."""


class ValidationFailure(LinkhopError):
    """Raised when a required form field is missing or empty."""


class MethodNotAllowed(LinkhopError):
    """Raised for an unsupported HTTP method on a known path."""


class ProcessFatal(LinkhopError):
    """Base class for errors that terminate the whole process."""


class StoreInitError(ProcessFatal):
    """The database could not be opened or its schema created."""


class TemplateMissing(ProcessFatal):
    """The admin page template is not present at startup."""


class OverlayError(ProcessFatal):
    """The tailnet node could not be resolved or its certificate provisioned."""


class ListenerFailed(ProcessFatal):
    """A listener stopped serving."""

    def __init__(self, name: str, cause: BaseException = None):
        if cause is None:
            message = f"{name} listener stopped"
        else:
            message = f"{name} listener failed: {cause}"
        super().__init__(message)
        self.name = name
        self.cause = cause

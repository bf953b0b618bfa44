"""Typed errors raised by SessionedBrowser.

Every error carries the name of the failing operation and the underlying
driver or IO exception, so callers can decide whether to retry.
"""


class BrowserError(Exception):
    """Base error carrying the failing operation and its cause."""

    def __init__(
        self,
        operation: str,
        message: str = "",
        cause: BaseException | None = None,
    ):
        self.operation = operation
        self.cause = cause
        if not message:
            message = f"{operation} failed"
            if cause is not None:
                message = f"{message}: {cause}"
        super().__init__(message)


class DriverInitError(BrowserError):
    """The browser handle could not be acquired. Fatal to the instance."""


class NavigationError(BrowserError):
    """Navigation failed or timed out. Transient, the caller may retry."""


class ScriptError(BrowserError):
    """The page reported a script evaluation error."""


class DriverError(BrowserError):
    """A cookie or other driver round-trip failed."""


class PersistError(BrowserError):
    """Writing or removing the session file failed."""


class SessionNotFoundError(BrowserError):
    """The session file does not exist. Callers may treat it as no prior session."""


class DeserializeError(BrowserError):
    """The session file content is corrupt."""


class BrowserStateError(BrowserError):
    """The operation is not allowed in the browser's current state."""


class InvalidCookieError(BrowserError):
    """A cookie passed in by the caller does not satisfy the Cookie model."""

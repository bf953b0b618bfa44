"""puppet-browser - a browser wrapper that keeps a logged-in cookie session
across process restarts."""

from .browser import MemoryDriver, PlaywrightDriver, SessionedBrowser, sessioned_browser
from .config import Settings, configure_logging, settings
from .cookies import Cookie, SessionFile
from .errors import (
    BrowserError,
    BrowserStateError,
    DeserializeError,
    DriverError,
    DriverInitError,
    InvalidCookieError,
    NavigationError,
    PersistError,
    ScriptError,
    SessionNotFoundError,
)

__all__ = [
    "SessionedBrowser",
    "sessioned_browser",
    "PlaywrightDriver",
    "MemoryDriver",
    "Cookie",
    "SessionFile",
    "Settings",
    "settings",
    "configure_logging",
    "BrowserError",
    "BrowserStateError",
    "DeserializeError",
    "DriverError",
    "DriverInitError",
    "InvalidCookieError",
    "NavigationError",
    "PersistError",
    "ScriptError",
    "SessionNotFoundError",
]

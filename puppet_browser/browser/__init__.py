"""Browser module - driver capability and sessioned browser."""

from .driver import (
    BROWSER_ARGS,
    BROWSER_PATHS,
    BrowserDriver,
    PlaywrightDriver,
    find_browser,
)
from .memory import DriverClosedError, MemoryDriver
from .session import BrowserState, SessionedBrowser, sessioned_browser

__all__ = [
    # Session
    "SessionedBrowser",
    "BrowserState",
    "sessioned_browser",
    # Drivers
    "BrowserDriver",
    "PlaywrightDriver",
    "MemoryDriver",
    "DriverClosedError",
    # Utilities
    "find_browser",
    "BROWSER_PATHS",
    "BROWSER_ARGS",
]

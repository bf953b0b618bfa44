"""Browser lifecycle and cookie-session persistence.

This module provides:
1. SessionedBrowser - one browser handle with cookie get/set and
   save/load of the cookie jar to a session file
2. sessioned_browser - context manager that opens a browser and always quits it

A SessionedBrowser is not safe for concurrent lifecycle calls: callers must
not run open(), quit() or init_driver() concurrently on one instance.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, TypeVar

from pydantic import ValidationError

from ..config import Settings, settings as default_settings
from ..cookies.models import Cookie, coerce_cookies
from ..cookies.store import SessionFile
from ..errors import (
    BrowserError,
    BrowserStateError,
    DriverError,
    DriverInitError,
    InvalidCookieError,
    NavigationError,
    ScriptError,
    SessionNotFoundError,
)
from .driver import BrowserDriver, PlaywrightDriver

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Round-trip used by ready_live(); harmless on any page
LIVE_PROBE_SCRIPT = "return document.readyState"


class BrowserState(str, Enum):
    """Lifecycle states of a SessionedBrowser."""

    UNOPENED = "unopened"
    DRIVER_INITIALIZING = "driver-initializing"
    DRIVER_READY = "driver-ready"
    OPENED = "opened"
    QUITTING = "quitting"
    QUIT = "quit"


_HANDLE_STATES = (BrowserState.DRIVER_READY, BrowserState.OPENED)


class SessionedBrowser:
    """A browser that can save its cookie jar and restore it in a later process.

    Usage:
        browser = SessionedBrowser(session_file="wechat.json")
        await browser.init_driver()
        await browser.open()
        await browser.load_session()
        ...
        await browser.save_session()
        await browser.quit()

    Or use as context manager (init_driver on enter, quit on exit):
        async with SessionedBrowser(session_file="wechat.json") as browser:
            await browser.open()
    """

    def __init__(
        self,
        driver: BrowserDriver | None = None,
        session_file: str | Path | None = None,
        url: str | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the browser wrapper. No browser is started yet.

        Args:
            driver: Driver to own (a PlaywrightDriver by default)
            session_file: Where save_session/load_session keep cookies
                (default derived from the profile, pid and a counter)
            url: Default URL for open() (default from settings)
            settings: Settings to use instead of the global instance
        """
        self.settings = settings or default_settings
        self._driver = driver if driver is not None else PlaywrightDriver(self.settings)

        if session_file is None:
            session_file = self.settings.default_session_file()
        self.session = SessionFile(session_file)
        self.url = url or self.settings.url

        self._state = BrowserState.UNOPENED
        self._target_state = "close"
        self._dead_reason: str | None = None

    def __repr__(self) -> str:
        return f"SessionedBrowser(state={self._state.value!r}, session={self.session!r})"

    async def __aenter__(self) -> "SessionedBrowser":
        try:
            await self.init_driver()
        except BaseException:
            await self.quit()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.quit()

    @property
    def driver(self) -> BrowserDriver:
        """The owned driver, for direct cookie CRUD."""
        return self._driver

    @property
    def session_file(self) -> Path:
        return self.session.path

    @property
    def current_state(self) -> BrowserState:
        return self._state

    @property
    def target_state(self) -> str:
        """Where the browser is heading: "open" after init/open, "close" after quit."""
        return self._target_state

    @target_state.setter
    def target_state(self, value: str) -> None:
        if value not in ("open", "close"):
            raise ValueError(f"target_state must be 'open' or 'close', not {value!r}")
        self._target_state = value

    # =========================================================================
    # Internals
    # =========================================================================

    def _require_handle(self, operation: str) -> None:
        if self._state in (BrowserState.QUITTING, BrowserState.QUIT):
            raise BrowserStateError(operation, f"{operation}() called after quit()")
        if self._state not in _HANDLE_STATES:
            raise BrowserStateError(
                operation,
                f"{operation}() needs a driver, call init_driver() first "
                f"(state: {self._state.value})",
            )

    async def _call(
        self,
        operation: str,
        error_cls: type[BrowserError],
        func: Callable[..., Awaitable[T]],
        *args: Any,
    ) -> T:
        """Run a driver call, mapping driver exceptions to ``error_cls``."""
        self._require_handle(operation)
        try:
            return await func(*args)
        except BrowserError:
            raise
        except Exception as e:
            if not self._driver.is_alive:
                self.mark_dead(f"{operation}: {e}")
            raise error_cls(operation, cause=e) from e

    async def _apply_cookies(self, cookies: list[Cookie]) -> list[Cookie | BaseException]:
        """Issue one add_cookie per cookie concurrently, collecting failures."""
        results = await asyncio.gather(
            *(self._driver.add_cookie(c) for c in cookies),
            return_exceptions=True,
        )
        return [
            r if isinstance(r, BaseException) else c for c, r in zip(cookies, results)
        ]

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def init_driver(self) -> None:
        """Start the browser. Raises DriverInitError if it cannot start."""
        if self._state is not BrowserState.UNOPENED:
            raise BrowserStateError(
                "init_driver",
                f"init_driver() not allowed in state {self._state.value}",
            )

        self._target_state = "open"
        self._state = BrowserState.DRIVER_INITIALIZING
        try:
            self.settings.ensure_dirs()
            await self._driver.new_session()
        except Exception as e:
            self.mark_dead(f"init_driver: {e}")
            raise DriverInitError("init_driver", cause=e) from e

        self._state = BrowserState.DRIVER_READY
        logger.info(f"Browser driver ready (session file: {self.session_file})")

    async def open(self, url: str | None = None) -> None:
        """Navigate to ``url`` or the configured default URL."""
        url = url or self.url
        await self._call("open", NavigationError, self._driver.navigate, url)
        self._state = BrowserState.OPENED
        self._target_state = "open"
        logger.info(f"Opened {url}")

    async def refresh(self) -> None:
        """Reload the current page."""
        await self._call("refresh", NavigationError, self._driver.refresh)

    async def init(self) -> "SessionedBrowser":
        """Start the browser, open the default URL and restore the saved session.

        A missing session file is not an error here; the page is only
        reloaded when cookies were restored.
        """
        await self.init_driver()
        await self.open()
        try:
            await self.load_session()
        except SessionNotFoundError:
            logger.info(f"No saved session at {self.session_file}, starting fresh")
            return self
        await self.refresh()
        return self

    async def quit(self) -> None:
        """Release the browser. Idempotent and never raises."""
        if self._state is BrowserState.QUIT:
            logger.debug("quit() called on a browser that already quit")
            return

        self._target_state = "close"
        self._state = BrowserState.QUITTING
        try:
            await self._driver.quit()
        except Exception as e:
            logger.warning(f"Browser quit failed, handle may already be dead: {e}")
        finally:
            self._state = BrowserState.QUIT

        logger.info("Browser quit")

    # =========================================================================
    # Liveness
    # =========================================================================

    def mark_dead(self, reason: str) -> None:
        """Record that the handle is unusable."""
        if self._dead_reason is None:
            logger.warning(f"Browser marked dead: {reason}")
            self._dead_reason = reason

    def dead(self) -> bool:
        """Cheap, local check. True only when the handle is known to be gone."""
        if self._state in (BrowserState.QUITTING, BrowserState.QUIT):
            return True
        if self._dead_reason is not None:
            return True
        if self._state in _HANDLE_STATES and not self._driver.is_alive:
            self.mark_dead("driver reports browser is not alive")
            return True
        return False

    async def ready_live(self) -> bool:
        """Round-trip a no-op script, bounded by ``settings.live_timeout``."""
        if self.dead() or self._state not in _HANDLE_STATES:
            return False
        try:
            await asyncio.wait_for(
                self._driver.execute_script(LIVE_PROBE_SCRIPT),
                timeout=self.settings.live_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Browser did not answer within {self.settings.live_timeout}s"
            )
            return False
        except Exception as e:
            logger.debug(f"Liveness probe failed: {e}")
            return False
        return True

    # =========================================================================
    # Scripts
    # =========================================================================

    async def execute(self, script: str, *args: Any) -> Any:
        """Run a WebDriver-style script body (``return 1+1``) in the page."""
        return await self._call("execute", ScriptError, self._driver.execute_script, script, *args)

    async def hostname(self) -> str:
        """Hostname of the page currently loaded."""
        return await self.execute("return location.hostname")

    # =========================================================================
    # Cookies
    # =========================================================================

    async def add_cookies(
        self, cookies: Cookie | dict | list[Cookie | dict]
    ) -> list[Cookie]:
        """Set one cookie or a sequence of cookies, concurrently.

        A cookie with an existing name and domain is overwritten by the
        browser. Returns the cookies that were set.
        """
        try:
            cookies = coerce_cookies(cookies)
        except ValidationError as e:
            raise InvalidCookieError("add_cookies", cause=e) from e
        self._require_handle("add_cookies")

        results = await self._apply_cookies(cookies)
        for result in results:
            if isinstance(result, BaseException):
                if not self._driver.is_alive:
                    self.mark_dead(f"add_cookies: {result}")
                raise DriverError("add_cookies", cause=result) from result

        logger.debug(f"Added {len(cookies)} cookies")
        return cookies

    async def get_cookies(self) -> list[Cookie]:
        """Live cookie jar, unfiltered."""
        return await self._call("get_cookies", DriverError, self._driver.get_cookies)

    async def get_cookie(self, name: str) -> Cookie | None:
        return await self._call("get_cookie", DriverError, self._driver.get_cookie, name)

    async def delete_all_cookies(self) -> None:
        await self._call("delete_all_cookies", DriverError, self._driver.delete_all_cookies)

    async def check_session(self) -> list[Cookie]:
        """The cookies save_session() would write right now."""
        return await self._call("check_session", DriverError, self._driver.get_cookies)

    # =========================================================================
    # Session persistence
    # =========================================================================

    async def save_session(self) -> list[Cookie]:
        """Write the live cookie jar to the session file.

        Returns:
            The cookies written, in file order

        Raises:
            PersistError: the file could not be written
        """
        cookies = await self._call("save_session", DriverError, self._driver.get_cookies)
        written = self.session.write(cookies)
        logger.info(f"Saved {len(written)} cookies to {self.session_file}")
        return written

    async def load_session(self) -> list[Cookie]:
        """Re-apply the cookies stored in the session file.

        Cookies the browser rejects are logged and skipped. An empty
        session file restores nothing and returns an empty list.

        Returns:
            The cookies the browser accepted

        Raises:
            SessionNotFoundError: the session file does not exist
            DeserializeError: the session file is corrupt
        """
        self._require_handle("load_session")
        cookies = self.session.read()

        results = await self._apply_cookies(cookies)
        restored = []
        for cookie, result in zip(cookies, results):
            if isinstance(result, BaseException):
                logger.warning(f"Skipped cookie {cookie.name!r} for {cookie.domain!r}: {result}")
            else:
                restored.append(cookie)

        if not self._driver.is_alive:
            self.mark_dead("browser died while restoring cookies")
            raise DriverError("load_session", "browser died while restoring cookies")

        logger.info(
            f"Loaded {len(restored)}/{len(cookies)} cookies from {self.session_file}"
        )
        return restored

    def clean_session(self) -> bool:
        """Delete the session file. Returns False if there was none."""
        removed = self.session.remove()
        if removed:
            logger.info(f"Removed session file {self.session_file}")
        return removed


# =============================================================================
# Context Manager
# =============================================================================


@asynccontextmanager
async def sessioned_browser(
    session_file: str | Path | None = None,
    url: str | None = None,
    driver: BrowserDriver | None = None,
    settings: Settings | None = None,
    load_session: bool = False,
) -> AsyncIterator[SessionedBrowser]:
    """Open a browser on ``url`` and always quit it afterwards.

    Usage:
        async with sessioned_browser("wechat.json", load_session=True) as browser:
            await browser.execute("return document.title")
    """
    browser = SessionedBrowser(
        driver=driver,
        session_file=session_file,
        url=url,
        settings=settings,
    )
    try:
        await browser.init_driver()
        await browser.open()
        if load_session:
            try:
                await browser.load_session()
            except SessionNotFoundError:
                logger.info(f"No saved session at {browser.session_file}")
        yield browser
    finally:
        await browser.quit()

"""In-memory BrowserDriver for exercising session logic without a browser."""

from typing import Any
from urllib.parse import urlparse

from ..cookies.models import Cookie
from .driver import BrowserDriver


class DriverClosedError(ConnectionError):
    """Raised by MemoryDriver when used after quit() or crash()."""


class MemoryDriver(BrowserDriver):
    """A fake browser holding its cookie jar in a dict.

    Usage:
        driver = MemoryDriver(scripts={"return 1+1": 2})
        browser = SessionedBrowser(driver=driver, session_file=path)

    Args:
        scripts: Script body -> result. Callables are invoked with the
            script arguments; exception instances are raised.
        page_cookies: URL -> cookies the "site" sets on every load.
        reject: Cookie names add_cookie() refuses, like a browser
            rejecting a cookie for the wrong domain.
    """

    def __init__(
        self,
        scripts: dict[str, Any] | None = None,
        page_cookies: dict[str, list[Cookie]] | None = None,
        reject: set[str] | None = None,
    ):
        self.scripts = dict(scripts or {})
        self.page_cookies = dict(page_cookies or {})
        self.reject = set(reject or ())

        self.url: str | None = None
        self.sessions_started = 0
        self._jar: dict[tuple[str, str, str], Cookie] = {}
        self._started = False
        self._closed = False

    @property
    def is_alive(self) -> bool:
        return self._started and not self._closed

    def _check(self) -> None:
        if not self.is_alive:
            raise DriverClosedError("browser is not running")

    def crash(self) -> None:
        """Simulate the browser process dying."""
        self._closed = True

    async def new_session(self) -> None:
        if self._closed:
            raise DriverClosedError("browser cannot be restarted")
        self._started = True
        self.sessions_started += 1

    async def navigate(self, url: str) -> None:
        self._check()
        self.url = url
        for cookie in self.page_cookies.get(url, []):
            self._jar[cookie.key] = cookie

    async def refresh(self) -> None:
        self._check()
        if self.url is not None:
            await self.navigate(self.url)

    async def execute_script(self, script: str, *args: Any) -> Any:
        self._check()
        body = script.strip()
        if body == "return location.hostname":
            return urlparse(self.url or "about:blank").hostname or ""
        if body == "return document.readyState":
            return "complete"
        if script not in self.scripts:
            raise ValueError(f"ReferenceError: unknown script {script!r}")
        result = self.scripts[script]
        if isinstance(result, BaseException):
            raise result
        if callable(result):
            return result(*args)
        return result

    async def get_cookies(self) -> list[Cookie]:
        self._check()
        return list(self._jar.values())

    async def add_cookie(self, cookie: Cookie) -> None:
        self._check()
        if cookie.name in self.reject:
            raise ValueError(f"invalid cookie domain for {cookie.name}")
        self._jar[cookie.key] = cookie

    async def delete_all_cookies(self) -> None:
        self._check()
        self._jar.clear()

    async def quit(self) -> None:
        self._closed = True

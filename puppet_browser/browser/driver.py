"""Browser driver capability and its Playwright implementation.

SessionedBrowser talks to the browser only through BrowserDriver, so the
session logic can run against MemoryDriver in tests.
"""

import logging
import os
import sys
from abc import ABC, abstractmethod
from typing import Any

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)

from ..config import Settings, settings as default_settings
from ..cookies.models import Cookie

logger = logging.getLogger(__name__)


# Installed browsers used instead of Playwright's bundled Chromium
BROWSER_PATHS = {
    "chrome": {
        "win32": [
            r"C:\Program Files\Google\Chrome\Application\chrome.exe",
            r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
            os.path.expandvars(r"%LOCALAPPDATA%\Google\Chrome\Application\chrome.exe"),
        ],
        "darwin": ["/Applications/Google Chrome.app/Contents/MacOS/Google Chrome"],
        "linux": [
            "/usr/bin/google-chrome",
            "/usr/bin/google-chrome-stable",
            "/usr/bin/chromium-browser",
        ],
    },
    "edge": {
        "win32": [
            r"C:\Program Files (x86)\Microsoft\Edge\Application\msedge.exe",
            r"C:\Program Files\Microsoft\Edge\Application\msedge.exe",
        ],
        "darwin": ["/Applications/Microsoft Edge.app/Contents/MacOS/Microsoft Edge"],
        "linux": ["/usr/bin/microsoft-edge", "/usr/bin/microsoft-edge-stable"],
    },
}

BROWSER_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-infobars",
    "--no-sandbox",
    "--disable-dev-shm-usage",
]


def find_browser(browser_type: str = "chrome") -> str | None:
    """Find installed browser path.

    Args:
        browser_type: "chrome" or "edge"

    Returns:
        Path to browser executable or None if not found
    """
    paths = BROWSER_PATHS.get(browser_type, {}).get(sys.platform, [])

    for path in paths:
        if os.path.exists(path):
            logger.info(f"Found {browser_type} browser: {path}")
            return path

    return None


def wrap_script(script: str) -> str:
    """Turn a WebDriver-style script body into a Playwright expression.

    The body runs as a plain function so ``return`` and ``arguments[i]``
    behave as they do under WebDriver.
    """
    return f"(args) => (function() {{\n{script}\n}}).apply(null, args)"


class BrowserDriver(ABC):
    """Capability interface over a browser-automation library."""

    @property
    @abstractmethod
    def is_alive(self) -> bool:
        """Local, network-free check that the handle is still usable."""

    @abstractmethod
    async def new_session(self) -> None:
        """Start the browser and open a page."""

    @abstractmethod
    async def navigate(self, url: str) -> None:
        pass

    @abstractmethod
    async def refresh(self) -> None:
        pass

    @abstractmethod
    async def execute_script(self, script: str, *args: Any) -> Any:
        """Run a script body in the page and return its result."""

    @abstractmethod
    async def get_cookies(self) -> list[Cookie]:
        pass

    async def get_cookie(self, name: str) -> Cookie | None:
        for cookie in await self.get_cookies():
            if cookie.name == name:
                return cookie
        return None

    @abstractmethod
    async def add_cookie(self, cookie: Cookie) -> None:
        pass

    @abstractmethod
    async def delete_all_cookies(self) -> None:
        pass

    @abstractmethod
    async def quit(self) -> None:
        """Release the browser. Must be safe to call more than once."""


class PlaywrightDriver(BrowserDriver):
    """BrowserDriver backed by Playwright's async API.

    One browser, one context and one page per driver.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @property
    def is_alive(self) -> bool:
        return (
            self._browser is not None
            and self._browser.is_connected()
            and self._page is not None
            and not self._page.is_closed()
        )

    @property
    def page(self) -> Page:
        """Get the current page."""
        if self._page is None:
            raise RuntimeError("Browser driver not started")
        return self._page

    @property
    def context(self) -> BrowserContext:
        """Get the browser context."""
        if self._context is None:
            raise RuntimeError("Browser driver not started")
        return self._context

    def _launch_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {"headless": self.settings.headless}
        browser_type = self.settings.browser_type

        if browser_type in ("chrome", "edge", "chromium"):
            options["args"] = BROWSER_ARGS

        if browser_type in ("chrome", "edge"):
            browser_path = find_browser(browser_type)
            if browser_path:
                options["executable_path"] = browser_path
                logger.info(f"Using installed {browser_type}: {browser_path}")
            else:
                logger.warning(f"{browser_type} not found, using Playwright's Chromium")

        if self.settings.proxy_url:
            options["proxy"] = {"server": self.settings.proxy_url}
            logger.info(f"Using proxy: {self.settings.proxy_url}")

        return options

    async def new_session(self) -> None:
        try:
            self._playwright = await async_playwright().start()

            engine_name = self.settings.browser_type
            if engine_name in ("chrome", "edge"):
                engine_name = "chromium"
            engine = getattr(self._playwright, engine_name)

            self._browser = await engine.launch(**self._launch_options())
            self._context = await self._browser.new_context(
                viewport={"width": 1280, "height": 800},
            )
            self._context.set_default_navigation_timeout(self.settings.navigation_timeout)
            self._page = await self._context.new_page()
        except BaseException:
            await self.quit()
            raise

        logger.info(f"Playwright {self.settings.browser_type} driver started")

    async def navigate(self, url: str) -> None:
        await self.page.goto(url, wait_until="domcontentloaded")

    async def refresh(self) -> None:
        await self.page.reload(wait_until="domcontentloaded")

    async def execute_script(self, script: str, *args: Any) -> Any:
        return await self.page.evaluate(wrap_script(script), list(args))

    async def get_cookies(self) -> list[Cookie]:
        return [Cookie.model_validate(c) for c in await self.context.cookies()]

    async def add_cookie(self, cookie: Cookie) -> None:
        data = cookie.to_playwright()
        if not cookie.domain:
            # Host-only cookie for the current page
            del data["domain"]
            del data["path"]
            data["url"] = self.page.url
        await self.context.add_cookies([data])

    async def delete_all_cookies(self) -> None:
        await self.context.clear_cookies()

    async def quit(self) -> None:
        context, browser, playwright = self._context, self._browser, self._playwright
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

        try:
            if context is not None:
                await context.close()
        finally:
            try:
                if browser is not None:
                    await browser.close()
            finally:
                if playwright is not None:
                    await playwright.stop()

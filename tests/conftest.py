"""Shared fixtures: an isolated Settings and a browser on a MemoryDriver."""

import pytest

from puppet_browser import Cookie, MemoryDriver, SessionedBrowser, Settings

FAR_FUTURE = 99999999999999

WECHAT_URL = "https://wx.qq.com/"


def make_cookie(name: str, value: str, domain: str = ".qq.com") -> Cookie:
    return Cookie(
        name=name,
        value=value,
        path="/",
        domain=domain,
        secure=False,
        expiry=FAR_FUTURE,
    )


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        data_dir=tmp_path / "data",
        profile="test",
        url=WECHAT_URL,
        live_timeout=0.5,
    )


@pytest.fixture
def session_path(tmp_path):
    return tmp_path / "session.json"


@pytest.fixture
def driver():
    return MemoryDriver(
        scripts={"return 1+1": 2},
        page_cookies={WECHAT_URL: [make_cookie("wxuin", "12345")]},
    )


@pytest.fixture
async def browser(driver, session_path, test_settings):
    b = SessionedBrowser(driver=driver, session_file=session_path, settings=test_settings)
    await b.init_driver()
    await b.open()
    yield b
    await b.quit()

"""End-to-end tests with a real Playwright browser.

Needs network access and installed browsers (``playwright install chromium``).
Run with PUPPET_INTEGRATION=1.
"""

import os

import pytest

from puppet_browser import SessionedBrowser, Settings

from .conftest import make_cookie

pytestmark = pytest.mark.skipif(
    os.environ.get("PUPPET_INTEGRATION") != "1",
    reason="set PUPPET_INTEGRATION=1 to run against a real browser",
)


@pytest.fixture
def real_settings(tmp_path):
    return Settings(_env_file=None, data_dir=tmp_path, profile="it")


async def test_browser_cookie_smoke(real_settings):
    b = SessionedBrowser(settings=real_settings)
    try:
        await b.init_driver()
        await b.open()

        assert await b.execute("return 1+1") == 2

        await b.delete_all_cookies()
        assert await b.get_cookies() == []

        await b.add_cookies([make_cookie("wechaty0", "8788-0"), make_cookie("wechaty1", "8788-1")])
        names = [c.name for c in await b.get_cookies()]
        assert names.count("wechaty0") == 1
        assert names.count("wechaty1") == 1

        await b.open()
        cookie = await b.get_cookie("wechaty0")
        assert cookie is not None and cookie.name == "wechaty0"

        assert b.dead() is False
        assert await b.ready_live() is True
    finally:
        await b.quit()

    assert b.dead() is True
    assert await b.ready_live() is False


async def test_session_save_before_quit_and_load_after_restart(real_settings, tmp_path):
    session_file = tmp_path / "wechaty-session.json"
    expected = make_cookie(
        "wechaty_save_to_session",
        "### saved to session file, loaded back by the next browser ###",
        domain=".wx.qq.com",
    )

    async with SessionedBrowser(session_file=session_file, settings=real_settings) as b:
        await b.open()
        await b.delete_all_cookies()
        await b.add_cookies(expected)

        saved = await b.save_session()
        assert [c.name for c in saved if c.name == expected.name] == [expected.name]

        await b.delete_all_cookies()
        assert await b.check_session() == []

        loaded = await b.load_session()
        assert expected.name in [c.name for c in loaded]

    async with SessionedBrowser(session_file=session_file, settings=real_settings) as b:
        await b.open()
        await b.load_session()

        cookie = await b.get_cookie(expected.name)
        assert cookie is not None
        assert cookie.value == expected.value

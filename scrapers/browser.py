# scrapers/browser.py
import asyncio
import random
import re
from contextlib import asynccontextmanager

from playwright.async_api import async_playwright

from scrapers.config import AnalysisConfig
from scrapers.discovery.search_play import search_url
from scrapers.models import DetailPage
from scrapers.store_play import detail_url

_CHROME_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_6) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/127.0.0.0 Safari/537.36"
)
_INSTALLS_TEXT = re.compile(r"downloads|installs", re.I)


@asynccontextmanager
async def chromium_page(headless: bool = True, user_agent: str | None = None, locale: str = "en-US",
                        proxy: str | None = None):
    async with async_playwright() as p:
        launch = {"headless": headless}
        if proxy:
            launch["proxy"] = {"server": proxy}
        browser = await p.chromium.launch(**launch)
        ctx = await browser.new_context(
            user_agent=user_agent or _CHROME_UA,
            locale=locale,
            viewport={"width": 1200, "height": 900},
        )
        page = await ctx.new_page()
        try:
            yield page
        finally:
            await ctx.close()
            await browser.close()


class PlayStoreSession:
    """One browser tab reused for the search page and every app page of an analysis."""

    def __init__(self, page, config: AnalysisConfig):
        self.page = page
        self.config = config

    async def search_page(self, keyword: str, country: str) -> str:
        cfg = self.config
        await self.page.goto(search_url(keyword, country, cfg.language),
                             wait_until="domcontentloaded", timeout=cfg.nav_timeout_ms)
        # results render lazily; give them a moment
        await self.page.wait_for_timeout(cfg.search_settle_ms + random.randint(0, max(0, cfg.search_settle_jitter_ms)))
        return await self.page.content()

    async def detail_page(self, package_id: str, country: str) -> DetailPage:
        cfg = self.config
        await self.page.goto(detail_url(package_id, country, cfg.language),
                             wait_until="domcontentloaded", timeout=cfg.nav_timeout_ms)
        try:
            await self.page.wait_for_selector("h1", timeout=cfg.title_wait_ms)
        except Exception:
            pass  # extract whatever rendered

        hint = None
        try:
            node = self.page.get_by_text(_INSTALLS_TEXT).first
            if await node.count() > 0:
                hint = await node.locator("xpath=..").inner_text()
        except Exception:
            pass

        return DetailPage(html=await self.page.content(), installs_hint=hint)


@asynccontextmanager
async def open_play_session(config: AnalysisConfig):
    locale = f"{config.language}-US" if config.language == "en" else config.language
    async with chromium_page(headless=config.headless, locale=locale, proxy=config.proxy) as page:
        yield PlayStoreSession(page, config)


def run(coro):
    return asyncio.run(coro)

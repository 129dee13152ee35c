# scrapers/discovery/search_play.py
import re
from urllib.parse import quote

from bs4 import BeautifulSoup

SEARCH_URL = "https://play.google.com/store/search?q={kw}&c=apps&hl={hl}&gl={gl}"

# App cards link to /store/apps/details?id=PACKAGE
_HREF_RX = re.compile(r"/store/apps/details\?id=([^&/]+)")
_RAW_RX = re.compile(r"/store/apps/details\?id=([\w.]+)")


def search_url(keyword: str, country: str = "us", language: str = "en") -> str:
    return SEARCH_URL.format(kw=quote(keyword), hl=quote(language), gl=quote(country))


def _soup(html: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html or "", "lxml")
    except Exception:
        return BeautifulSoup(html or "", "html.parser")


def extract_package_ids(html: str | None, limit: int) -> list[str]:
    """
    Package ids referenced by a search-results page, first-seen order, unique,
    at most `limit`. Anchor scan first; a raw-text regex pass over the same
    markup fills whatever slots are left.
    """
    if not html or limit <= 0:
        return []

    # dict keeps insertion order -> ordered set
    found: dict[str, None] = {}

    for a in _soup(html).select('a[href*="/store/apps/details?id="]'):
        if len(found) >= limit:
            break
        m = _HREF_RX.search(a.get("href") or "")
        if m and m.group(1):
            found.setdefault(m.group(1), None)

    if len(found) < limit:
        for m in _RAW_RX.finditer(html):
            if len(found) >= limit:
                break
            found.setdefault(m.group(1), None)

    return list(found)[:limit]

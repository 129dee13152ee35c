# scrapers/store_play.py
import json
import math
import re
from urllib.parse import quote
from typing import Callable, Iterable, Optional

from bs4 import BeautifulSoup

from scrapers.common import clean_text
from scrapers.models import CompetitorRecord, DetailPage

DETAIL_URL = "https://play.google.com/store/apps/details?id={pkg}&hl={hl}&gl={gl}"

Strategy = Callable[[BeautifulSoup], Optional[str]]

_INSTALLS_MENTION = re.compile(r"downloads|installs", re.I)
_INSTALLS_FIELD = re.compile(r"\d[\d,.]*(?:\s*[KMB](?![a-z]))?\+?(?:\s*(?:downloads|installs))?", re.I)
_RATING_PATTERNS = (
    re.compile(r"([\d.]+)\s*out of\s*5", re.I),
    re.compile(r"([\d.]+)\s*star", re.I),
    re.compile(r"Rated\s*([\d.]+)", re.I),
)
_ABOUT_PREFIX = re.compile(r"^\s*About this app\s*(?:arrow_forward)?\s*", re.I)


def detail_url(package_id: str, country: str = "us", language: str = "en") -> str:
    return DETAIL_URL.format(pkg=quote(package_id), hl=quote(language), gl=quote(country))


# --------------------------- numeric parsers ---------------------------

def _leading_number(s: str, as_float: bool):
    m = re.match(r"\d*\.\d+|\d+" if as_float else r"\d+", s)
    # runs of digits too long for a float count as unparseable
    if not m or not math.isfinite(float(m.group(0))):
        return None
    return float(m.group(0)) if as_float else int(m.group(0))


def _scaled(n: float | None, factor: int) -> int | None:
    if n is None or not math.isfinite(n * factor):
        return None
    return int(round(n * factor))


def parse_installs(text: str | None) -> int | None:
    """
    '1,000+' -> 1000, '10M' -> 10_000_000, '500K' -> 500_000, '' -> None.
    Keeps digits, '.', K/M/B only; M and K scale the leading float.
    """
    if not text:
        return None
    norm = re.sub(r"[^\dKMBkmb.]", "", text).upper()
    if "M" in norm:
        return _scaled(_leading_number(norm, as_float=True), 1_000_000)
    if "K" in norm:
        return _scaled(_leading_number(norm, as_float=True), 1_000)
    return _leading_number(norm.replace(",", "").replace("+", ""), as_float=False)


def parse_rating(label: str | None) -> float | None:
    """First of 'N out of 5', 'N star', 'Rated N' that matches; 0.0 stays 0.0."""
    if not label:
        return None
    for rx in _RATING_PATTERNS:
        m = rx.search(label)
        if m:
            try:
                return float(m.group(1))
            except ValueError:
                return None
    return None


# --------------------------- strategies ---------------------------
# Each strategy: soup -> str | None. Chains are tried in order, first
# non-empty (after clean_text) wins.

def _text_of(soup: BeautifulSoup, selector: str) -> Optional[str]:
    node = soup.select_one(selector)
    return node.get_text(" ") if node else None


def _attr_of(soup: BeautifulSoup, selector: str, attr: str) -> Optional[str]:
    node = soup.select_one(selector)
    return node.get(attr) if node else None


def _ld_json(soup: BeautifulSoup) -> list[dict]:
    out = []
    for s in soup.select('script[type="application/ld+json"]'):
        try:
            data = json.loads(s.string or s.get_text() or "")
        except ValueError:
            continue
        items = data if isinstance(data, list) else [data]
        out.extend(x for x in items if isinstance(x, dict))
    return out


def title_heading_span(soup):
    return _text_of(soup, "h1 span")

def title_heading(soup):
    return _text_of(soup, "h1")

def title_ld_json(soup):
    for block in _ld_json(soup):
        if block.get("name"):
            return str(block["name"])
    return None


def description_data_gid(soup):
    txt = _text_of(soup, '[data-g-id="description"]')
    return _ABOUT_PREFIX.sub("", txt) if txt else None

def description_itemprop(soup):
    txt = _text_of(soup, '[itemprop="description"]')
    return _ABOUT_PREFIX.sub("", txt) if txt else None

def description_meta(soup):
    return _attr_of(soup, 'meta[name="description"]', "content")

def description_ld_json(soup):
    for block in _ld_json(soup):
        if block.get("description"):
            return str(block["description"])
    return None


def rating_label_rated(soup):
    return _attr_of(soup, '[aria-label*="Rated"]', "aria-label")

def rating_label_star_img(soup):
    return _attr_of(soup, 'div[role="img"][aria-label*="star"]', "aria-label")


def developer_link(soup):
    return _text_of(soup, 'a[href*="/store/apps/dev"]')

def developer_ld_json(soup):
    for block in _ld_json(soup):
        author = block.get("author")
        if isinstance(author, dict) and author.get("name"):
            return str(author["name"])
    return None


TITLE_CHAIN: tuple[Strategy, ...] = (title_heading_span, title_heading, title_ld_json)
DESCRIPTION_CHAIN: tuple[Strategy, ...] = (
    description_data_gid, description_itemprop, description_meta, description_ld_json,
)
RATING_LABEL_CHAIN: tuple[Strategy, ...] = (rating_label_rated, rating_label_star_img)
DEVELOPER_CHAIN: tuple[Strategy, ...] = (developer_link, developer_ld_json)


def first_of(soup: BeautifulSoup, chain: Iterable[Strategy]) -> Optional[str]:
    """Run strategies in priority order; a strategy that blows up just counts as a miss."""
    for strategy in chain:
        try:
            value = clean_text(strategy(soup))
        except Exception:
            value = ""
        if value:
            return value
    return None


# --------------------------- installs ---------------------------

def _install_text_nodes(soup: BeautifulSoup) -> list[str]:
    """Text of the nearest element around each downloads/installs mention that holds a digit."""
    out = []
    for node in soup.find_all(string=_INSTALLS_MENTION):
        if node.parent is not None and node.parent.name in ("script", "style"):
            continue
        el = node.parent
        for _ in range(3):
            if el is None:
                break
            txt = el.get_text(" ")
            if re.search(r"\d", txt):
                out.append(txt)
                break
            el = el.parent
    return out


def installs_text(soup: BeautifulSoup, hint: str | None = None) -> Optional[str]:
    """Join every install-count source, then pick the first formatted number in it."""
    sources = [_attr_of(soup, 'meta[itemprop="interactionCount"]', "content")]
    sources += _install_text_nodes(soup)
    sources.append(hint)
    joined = " | ".join(clean_text(s) for s in sources if s and clean_text(s))
    if not joined:
        return None
    m = _INSTALLS_FIELD.search(joined)
    return m.group(0) if m else None


# --------------------------- record ---------------------------

def extract_competitor(package_id: str, page: DetailPage) -> CompetitorRecord:
    """Normalized record for one app page; each field falls back on its own."""
    try:
        soup = BeautifulSoup(page.html or "", "lxml")
    except Exception:
        soup = BeautifulSoup(page.html or "", "html.parser")

    title = first_of(soup, TITLE_CHAIN) or package_id
    description = first_of(soup, DESCRIPTION_CHAIN) or ""
    rating = parse_rating(first_of(soup, RATING_LABEL_CHAIN))
    developer = first_of(soup, DEVELOPER_CHAIN)

    try:
        installs = parse_installs(installs_text(soup, page.installs_hint))
    except Exception:
        installs = None

    return CompetitorRecord(
        package=package_id,
        title=title,
        description=description,
        installs=installs,
        rating=rating,
        developer=developer,
    )

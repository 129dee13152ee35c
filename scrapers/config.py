# scrapers/config.py
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from scrapers.common import setup_logger

DEFAULT_CFG = Path(__file__).parent / "analysis.yml"
logger = setup_logger("config")

STOPWORDS = frozenset([
    "the", "and", "for", "with", "from", "this", "that", "have", "your", "more", "what", "when", "where", "which", "will",
    "app", "apps", "android", "mobile", "free", "pro", "plus", "-", "a", "an", "in", "on", "of", "to", "by", "is", "are",
])

SUGGEST_URL = "https://suggestqueries.google.com/complete/search"


@dataclass(frozen=True)
class AnalysisConfig:
    # keyword scoring
    title_boost: int = 3
    seed_multiplier: int = 2
    min_token_length: int = 3
    stopwords: frozenset = STOPWORDS
    max_keywords: int = 120
    install_scale: int = 100_000
    fallback_difficulty: int = 50

    # request pacing (ms)
    request_delay_ms: int = 700
    delay_jitter_ms: int = 600

    # request shape
    default_limit: int = 20
    max_limit: int = 50
    default_country: str = "us"
    language: str = "en"

    # browser
    headless: bool = True
    proxy: str | None = None
    nav_timeout_ms: int = 30_000
    title_wait_ms: int = 5_000
    search_settle_ms: int = 1_000
    search_settle_jitter_ms: int = 800

    # suggest endpoint
    suggest_url: str = SUGGEST_URL
    suggest_timeout: float = 10.0

    @property
    def seed_weight(self) -> int:
        return self.title_boost * self.seed_multiplier


def _coerce(key: str, value, default):
    """YAML value -> the type of the field's default; raises TypeError/ValueError when it can't."""
    if key == "stopwords":
        if isinstance(value, str) or not isinstance(value, (list, tuple, set)):
            raise TypeError("stopwords must be a list")
        return frozenset(str(x).lower() for x in value)
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise TypeError(f"{key} must be true/false")
        return value
    if isinstance(default, (int, float)):
        if isinstance(value, bool) or value is None:
            raise TypeError(f"{key} must be a number")
        return type(default)(value)
    # str fields, and proxy (default None)
    return None if value is None else str(value)


def load_config(path: str | Path | None = None) -> AnalysisConfig:
    """
    Build an AnalysisConfig from YAML (explicit path, else analysis.yml beside
    this module). Missing/broken files fall back to defaults; PROXY env wins.
    """
    cfg = AnalysisConfig()
    p = Path(path) if path else DEFAULT_CFG
    raw = {}
    if p.exists():
        try:
            raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError:
            logger.warning(f"{p} exists but could not be parsed; using defaults")
            raw = {}
    elif path:
        logger.warning(f"config file {p} not found; using defaults")

    if not isinstance(raw, dict):
        logger.warning(f"{p} is not a mapping; using defaults")
        raw = {}

    known = {f.name for f in fields(AnalysisConfig)}
    overrides = {}
    for k, v in raw.items():
        if k not in known:
            logger.warning(f"ignoring unknown config key '{k}'")
            continue
        try:
            overrides[k] = _coerce(k, v, getattr(cfg, k))
        except (TypeError, ValueError):
            logger.warning(f"config key '{k}' has unusable value {v!r}; keeping default")

    if os.environ.get("PROXY"):
        overrides["proxy"] = os.environ["PROXY"]

    return replace(cfg, **overrides) if overrides else cfg

# etl/keywords.py
"""
Keyword frequency over competitor text.

Title tokens count `title_boost` each, description tokens count 1, and every
seed keyword token counts `title_boost * seed_multiplier`. Seed tokens skip the
stopword filter, competitor tokens don't.
"""
import re
from typing import Dict, Iterable, List, Tuple

from scrapers.config import AnalysisConfig
from scrapers.models import CompetitorRecord

_CURLY = re.compile(r"[\u2018\u2019\u201c\u201d]")
_NON_TOKEN = re.compile(r"[^a-z0-9\s']")


def tokenize(text: str | None) -> List[str]:
    """Lowercase, curly quotes -> ', anything outside [a-z0-9 whitespace '] -> space, split."""
    if not text:
        return []
    s = _CURLY.sub("'", text.lower())
    s = _NON_TOKEN.sub(" ", s)
    return [t for t in s.split() if t]


def _qualifies(token: str, cfg: AnalysisConfig) -> bool:
    return len(token) >= cfg.min_token_length and token not in cfg.stopwords


def _add(freq: Dict[str, int], tokens: Iterable[str], weight: int, cfg: AnalysisConfig):
    for tk in tokens:
        if _qualifies(tk, cfg):
            freq[tk] = freq.get(tk, 0) + weight


def aggregate_frequencies(competitors: Iterable[CompetitorRecord], seed_keyword: str,
                          config: AnalysisConfig | None = None) -> Dict[str, int]:
    cfg = config or AnalysisConfig()
    freq: Dict[str, int] = {}
    for c in competitors:
        _add(freq, tokenize(c.title), cfg.title_boost, cfg)
        _add(freq, tokenize(c.description), 1, cfg)

    # seed keyword: plain whitespace split, no punctuation scrub, no stopwords
    for tk in (seed_keyword or "").lower().split():
        if len(tk) >= cfg.min_token_length:
            freq[tk] = freq.get(tk, 0) + cfg.seed_weight
    return freq


def rank_frequencies(freq: Dict[str, int]) -> List[Tuple[str, int]]:
    """Descending by score; equal scores keep the map's insertion order (stable sort)."""
    return sorted(freq.items(), key=lambda kv: kv[1], reverse=True)

# scrapers/discovery/suggest.py
import json
import re

import httpx

from scrapers.common import setup_logger
from scrapers.config import AnalysisConfig
from scrapers.errors import CollaboratorError

logger = setup_logger("suggest")

# ["query", ["s1", "s2", ...], ...] when the body isn't clean JSON
_ARRAY_RX = re.compile(r'\[".*?",\s*(\[[^\]]+\])')


def parse_suggestions(text: str | None) -> list[str]:
    """
    Pull the suggestion list (2nd element) out of an autocomplete response.
    Malformed JSON falls back to a regex; if that fails too -> [].
    """
    if not text:
        return []
    try:
        data = json.loads(text)
    except ValueError:
        pass
    else:
        if isinstance(data, list) and len(data) > 1 and isinstance(data[1], list):
            return [str(s) for s in data[1]]
        return []

    m = _ARRAY_RX.search(text)
    if not m:
        logger.info("suggest response is neither JSON nor a recognisable array")
        return []
    try:
        arr = json.loads(m.group(1))
    except ValueError:
        logger.info("suggest regex fallback matched but array did not parse")
        return []
    return [str(s) for s in arr] if isinstance(arr, list) else []


def suggest(query: str | None, config: AnalysisConfig | None = None,
            client: httpx.Client | None = None) -> list[str]:
    """Autocomplete strings for `query` from the apps suggest endpoint."""
    q = (query or "").strip()
    if not q:
        return []
    cfg = config or AnalysisConfig()
    params = {"client": "firefox", "ds": "apps", "q": q}

    try:
        if client is not None:
            r = client.get(cfg.suggest_url, params=params)
        else:
            with httpx.Client(timeout=cfg.suggest_timeout, follow_redirects=True) as c:
                r = c.get(cfg.suggest_url, params=params)
        r.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Suggest error for '{q}': {e}")
        raise CollaboratorError(f"suggest failed: {e}") from e

    return parse_suggestions(r.text)

# scrapers/common.py
import logging, math, re, sys

_INVISIBLE = re.compile(r"[\u200b-\u200d\u2060\ufeff]")
_WS = re.compile(r"\s+")

def setup_logger(name="scraper"):
    logger = logging.getLogger(name)
    if logger.handlers:  # avoid duplicate handlers on reruns
        return logger
    logger.setLevel(logging.INFO)
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
    logger.addHandler(h)
    return logger

def round_half_up(x: float) -> int:
    """2.5 -> 3, 0.4 -> 0 (not banker's rounding)."""
    return int(math.floor(x + 0.5))

def clean_text(s: str | None) -> str:
    """Drop zero-width/BOM chars, collapse whitespace runs, trim. None -> ''."""
    if not s:
        return ""
    # invisible chars go first so they can't leave a double space behind
    return _WS.sub(" ", _INVISIBLE.sub("", s)).strip()

# etl/difficulty.py
import math
from typing import Iterable, List, Optional, Sequence, Tuple

from scrapers.common import round_half_up
from scrapers.config import AnalysisConfig
from scrapers.models import ScoredKeyword


def average_installs(installs: Iterable[Optional[int]]) -> float:
    """Mean over positive install counts; 0 when there are none."""
    vals = [n for n in installs if n is not None and n > 0]
    return sum(vals) / len(vals) if vals else 0.0


def difficulty_for(score: float, avg_installs: float, config: AnalysisConfig | None = None) -> int:
    """
    1..100 estimate: market volume over keyword frequency, scaled by install magnitude.
    Falls back to fallback_difficulty / (1 + score) when the primary value is <= 0 or not finite.
    """
    cfg = config or AnalysisConfig()
    scale = max(1.0, avg_installs / cfg.install_scale)
    raw = (avg_installs / (1 + score)) / max(1.0, scale)

    difficulty = round_half_up(min(100.0, raw)) if math.isfinite(raw) else 0
    if difficulty <= 0:
        difficulty = round_half_up(min(100.0, max(1.0, cfg.fallback_difficulty / (1 + score))))
    return difficulty


def score_keywords(ranked: Sequence[Tuple[str, int]], avg_installs: float,
                   config: AnalysisConfig | None = None) -> List[ScoredKeyword]:
    cfg = config or AnalysisConfig()
    return [
        ScoredKeyword(keyword=kw, score=score, difficulty=difficulty_for(score, avg_installs, cfg))
        for kw, score in ranked[: cfg.max_keywords]
    ]

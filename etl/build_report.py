# etl/build_report.py
import datetime as dt
import json
from pathlib import Path
from typing import Sequence

import pandas as pd

from etl.difficulty import average_installs, score_keywords
from etl.keywords import aggregate_frequencies, rank_frequencies
from scrapers.config import AnalysisConfig
from scrapers.models import AnalysisResult, CompetitorRecord


def assemble_result(keyword: str, country: str, limit: int,
                    competitors: Sequence[CompetitorRecord],
                    config: AnalysisConfig | None = None) -> AnalysisResult:
    """
    Competitors (already in discovery order) + scored keywords -> AnalysisResult.
    Rank is the 1-based position in `competitors`.
    """
    cfg = config or AnalysisConfig()
    freq = aggregate_frequencies(competitors, keyword, cfg)
    avg = average_installs(c.installs for c in competitors)
    suggestions = score_keywords(rank_frequencies(freq), avg, cfg)
    return AnalysisResult(
        keyword=keyword,
        country=country,
        limit=limit,
        avg_installs=avg,
        competitors=tuple(competitors),
        suggestions=tuple(suggestions),
        scraped_at=dt.date.today().isoformat(),
    )


def to_frames(result: AnalysisResult) -> tuple[pd.DataFrame, pd.DataFrame]:
    """(competitors, keywords) tables for CSV export."""
    d = result.to_dict()
    comp = pd.DataFrame(
        d["competitors"],
        columns=["rank", "package", "title", "description", "rating", "installs", "developer"],
    )
    kws = pd.DataFrame(d["suggestions"], columns=["keyword", "score", "difficulty"])
    for df in (comp, kws):
        df.insert(0, "seed_keyword", result.keyword)
        df.insert(1, "country", result.country)
    # nullable ints so missing installs don't turn the column into floats
    comp["installs"] = comp["installs"].astype("Int64")
    return comp, kws


def write_csvs(result: AnalysisResult, out_dir: str | Path) -> tuple[Path, Path]:
    outp = Path(out_dir)
    outp.mkdir(parents=True, exist_ok=True)
    comp, kws = to_frames(result)
    comp_path, kw_path = outp / "competitors.csv", outp / "keywords.csv"
    comp.to_csv(comp_path, index=False)
    kws.to_csv(kw_path, index=False)
    return comp_path, kw_path


def write_json(obj: dict, out_path: str | Path) -> Path:
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")
    return p


def write_jsonl(rows, out_path: str | Path) -> Path:
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        for r in rows:
            f.write(json.dumps(r, ensure_ascii=False) + "\n")
    return p

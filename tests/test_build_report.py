from __future__ import annotations

import pandas as pd

from etl.build_report import assemble_result, to_frames, write_csvs
from scrapers.config import AnalysisConfig
from scrapers.models import CompetitorRecord


def _comps():
    return [
        CompetitorRecord(package="com.a", title="Budget Tracker", description="track spending",
                         installs=2_000_000, rating=4.6, developer="Acme"),
        CompetitorRecord.degraded("com.b"),
        CompetitorRecord(package="com.c", title="Expense Log", installs=None, rating=0.0),
    ]


def test_assemble_result_ranks_by_position_and_averages_positive_installs() -> None:
    res = assemble_result("budget", "de", 3, _comps(), AnalysisConfig())
    d = res.to_dict()
    assert [(c["rank"], c["package"]) for c in d["competitors"]] == [(1, "com.a"), (2, "com.b"), (3, "com.c")]
    assert d["avg_installs"] == 2_000_000
    assert d["country"] == "de"
    assert d["limit"] == 3
    assert d["scraped_at"]
    # zero rating survives as 0.0, missing stays None
    assert d["competitors"][2]["rating"] == 0.0
    assert d["competitors"][1]["rating"] is None
    assert d["suggestions"][0] == {"keyword": "budget", "score": 9, "difficulty": 100}


def test_to_frames_and_csv(tmp_path) -> None:
    res = assemble_result("budget", "us", 3, _comps(), AnalysisConfig())
    comp, kws = to_frames(res)
    assert list(comp.columns[:3]) == ["seed_keyword", "country", "rank"]
    assert len(comp) == 3
    assert pd.isna(comp.loc[1, "installs"])
    assert comp.loc[0, "installs"] == 2_000_000
    assert set(kws.columns) >= {"keyword", "score", "difficulty"}

    comp_path, kw_path = write_csvs(res, tmp_path / "out")
    back = pd.read_csv(comp_path)
    assert list(back["package"]) == ["com.a", "com.b", "com.c"]
    assert pd.read_csv(kw_path)["keyword"].iloc[0] == "budget"


def test_avg_installs_rounds_half_up() -> None:
    comps = [CompetitorRecord(package="a", title="A", installs=2),
             CompetitorRecord(package="b", title="B", installs=3)]
    assert assemble_result("x", "us", 2, comps).to_dict()["avg_installs"] == 3

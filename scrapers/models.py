# scrapers/models.py
from dataclasses import dataclass

from scrapers.common import round_half_up


@dataclass(frozen=True)
class DetailPage:
    """What the browser hands back for one app page."""
    html: str
    installs_hint: str | None = None


@dataclass(frozen=True)
class CompetitorRecord:
    package: str
    title: str
    description: str = ""
    installs: int | None = None
    rating: float | None = None
    developer: str | None = None

    @classmethod
    def degraded(cls, package: str) -> "CompetitorRecord":
        # stand-in for a candidate whose page could not be fetched/parsed
        return cls(package=package, title=package)


@dataclass(frozen=True)
class ScoredKeyword:
    keyword: str
    score: int
    difficulty: int

    def to_dict(self) -> dict:
        return {"keyword": self.keyword, "score": self.score, "difficulty": self.difficulty}


@dataclass(frozen=True)
class AnalysisResult:
    keyword: str
    country: str
    limit: int
    avg_installs: float
    competitors: tuple = ()
    suggestions: tuple = ()
    scraped_at: str | None = None

    @property
    def top_count(self) -> int:
        return len(self.competitors)

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "country": self.country,
            "limit": self.limit,
            "top_count": self.top_count,
            "avg_installs": round_half_up(self.avg_installs),
            "scraped_at": self.scraped_at,
            "competitors": [
                {
                    "rank": i,
                    "package": c.package,
                    "title": c.title,
                    "description": c.description,
                    "rating": c.rating,
                    "installs": c.installs,
                    "developer": c.developer,
                }
                for i, c in enumerate(self.competitors, start=1)
            ],
            "suggestions": [s.to_dict() for s in self.suggestions],
        }

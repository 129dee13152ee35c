# scrapers/scrape_pipeline.py
import argparse, asyncio, json, random, sys
from pathlib import Path

import yaml

from etl.build_report import assemble_result, write_csvs, write_json, write_jsonl
from scrapers.browser import open_play_session, run
from scrapers.common import setup_logger
from scrapers.config import AnalysisConfig, load_config
from scrapers.discovery.search_play import extract_package_ids
from scrapers.discovery.suggest import suggest
from scrapers.errors import AnalysisError, CollaboratorError, InputError
from scrapers.models import AnalysisResult, CompetitorRecord
from scrapers.store_play import extract_competitor

OUTPUT_DIR = Path("data") / "output"
logger = setup_logger("orchestrator")


# ---------- pacing ----------
class Pacer:
    """Randomized gap between app-page requests: base + [0, jitter) ms."""

    def __init__(self, config: AnalysisConfig, sleep=asyncio.sleep, rng: random.Random | None = None):
        self.base_ms = max(0, config.request_delay_ms)
        self.jitter_ms = max(0, config.delay_jitter_ms)
        self.sleep = sleep
        self.rng = rng or random.Random()

    def delay(self) -> float:
        jitter = self.rng.randrange(self.jitter_ms) if self.jitter_ms else 0
        return (self.base_ms + jitter) / 1000.0

    async def pace(self):
        await self.sleep(self.delay())


# ---------- input ----------
def _normalize_inputs(keyword, country, limit, cfg: AnalysisConfig):
    kw = (keyword or "").strip()
    if not kw:
        raise InputError("keyword required")
    cc = (country or "").strip().lower() or cfg.default_country
    if limit is None or (isinstance(limit, str) and not limit.strip()):
        n = cfg.default_limit
    else:
        try:
            n = int(limit)
        except (TypeError, ValueError):
            raise InputError(f"limit must be an integer, got {limit!r}") from None
    return kw, cc, min(cfg.max_limit, max(1, n))


# ---------- core ----------
async def _collect_competitors(session, packages: list[str], country: str, pacer: Pacer) -> list[CompetitorRecord]:
    rows = []
    total = len(packages)
    for i, pkg in enumerate(packages, start=1):
        logger.info(f"Scraping {i}/{total}: {pkg}")
        try:
            page = await session.detail_page(pkg, country)
            rows.append(extract_competitor(pkg, page))
        except Exception as e:
            logger.warning(f"detail fetch error {pkg}: {e}")
            rows.append(CompetitorRecord.degraded(pkg))
        if i < total:
            await pacer.pace()
    return rows


async def _analyze_async(keyword: str, country: str, limit: int, cfg: AnalysisConfig,
                         session_factory, pacer: Pacer) -> AnalysisResult:
    try:
        async with session_factory(cfg) as session:
            try:
                search_html = await session.search_page(keyword, country)
            except Exception as e:
                raise CollaboratorError(f"search page failed: {e}") from e

            packages = extract_package_ids(search_html, limit)
            logger.info(f"'{keyword}' ({country}): {len(packages)} candidates")
            competitors = await _collect_competitors(session, packages, country, pacer)
    except AnalysisError:
        raise
    except Exception as e:
        raise CollaboratorError(f"analyze failed: {e}") from e

    return assemble_result(keyword, country, limit, competitors, cfg)


def analyze(keyword: str, country: str | None = None, limit=None,
            config: AnalysisConfig | None = None, session_factory=None,
            pacer: Pacer | None = None) -> AnalysisResult:
    """
    Search `keyword`, read each competitor page one at a time, score keywords.
    Raises InputError before touching the browser, CollaboratorError if the
    session/search page fails. Per-app failures become degraded records.
    """
    cfg = config or AnalysisConfig()
    kw, cc, n = _normalize_inputs(keyword, country, limit, cfg)
    logger.info(f"analyze keyword='{kw}' country={cc} limit={n}")
    result = run(_analyze_async(
        kw, cc, n, cfg,
        session_factory or open_play_session,
        pacer or Pacer(cfg),
    ))
    logger.info(f"analyze done: {result.top_count} competitors, "
                f"{len(result.suggestions)} keywords, avg installs {result.avg_installs:.0f}")
    return result


# ---------- commands ----------
def cmd_analyze(keyword, country, limit, cfg, out=None, csv_dir=None) -> int:
    try:
        result = analyze(keyword, country, limit, config=cfg)
    except AnalysisError as e:
        logger.error(f"analyze failed: {e.detail}")
        print(json.dumps(e.to_dict()))
        return 1
    data = result.to_dict()
    if out:
        logger.info(f"analyze -> {write_json(data, out)}")
    if csv_dir:
        comp_path, kw_path = write_csvs(result, csv_dir)
        logger.info(f"analyze -> {comp_path}, {kw_path}")
    if not out:
        print(json.dumps(data, ensure_ascii=False, indent=2))
    return 0


def cmd_suggest(query, cfg) -> int:
    try:
        items = suggest(query, cfg)
    except AnalysisError as e:
        print(json.dumps(e.to_dict()))
        return 1
    print(json.dumps({"suggestions": items}, ensure_ascii=False))
    return 0


def _load_keywords(path: Path) -> list[str]:
    if not path.exists():
        raise InputError(f"keywords file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise InputError(f"keywords file could not be parsed: {e}") from e
    kws = data.get("keywords", []) if isinstance(data, dict) else data
    if isinstance(kws, str):
        kws = [kws]
    return [str(k) for k in (kws or []) if str(k).strip()]


def cmd_batch(keywords_file, country, limit, cfg, out_dir=str(OUTPUT_DIR), analyze_fn=analyze) -> int:
    try:
        keywords = _load_keywords(Path(keywords_file))
    except InputError as e:
        logger.error(e.detail)
        return 1

    rows, failed = [], 0
    for i, kw in enumerate(keywords, start=1):
        logger.info(f"batch {i}/{len(keywords)}: {kw}")
        try:
            rows.append(analyze_fn(kw, country, limit, config=cfg).to_dict())
        except AnalysisError as e:
            failed += 1
            logger.error(f"'{kw}' failed: {e.detail}")
            rows.append({"keyword": kw, **e.to_dict()})

    out = write_jsonl(rows, Path(out_dir) / "batch.jsonl")
    logger.info(f"batch -> wrote {len(rows)} rows ({failed} failed) at {out}")
    return 0


# ---------- main ----------
def main(argv=None):
    parser = argparse.ArgumentParser(description="Play Store keyword / competitor analysis")
    parser.add_argument("--config", default=None, help="YAML config (defaults to scrapers/analysis.yml)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_an = sub.add_parser("analyze", help="Competitors + keyword difficulty for one keyword")
    p_an.add_argument("--keyword", required=True)
    p_an.add_argument("--country", default=None)
    p_an.add_argument("--limit", default=None)
    p_an.add_argument("--out", default=None, help="Write result JSON here instead of stdout")
    p_an.add_argument("--csv-dir", default=None, help="Also write competitors.csv / keywords.csv")

    p_sg = sub.add_parser("suggest", help="Autocomplete suggestions")
    p_sg.add_argument("--q", required=True)

    p_b = sub.add_parser("batch", help="Analyze every keyword listed in a YAML file")
    p_b.add_argument("--keywords-file", required=True)
    p_b.add_argument("--country", default=None)
    p_b.add_argument("--limit", default=None)
    p_b.add_argument("--out-dir", default=str(OUTPUT_DIR))

    args = parser.parse_args(argv)
    cfg = load_config(args.config)

    if args.cmd == "analyze":
        return cmd_analyze(args.keyword, args.country, args.limit, cfg, args.out, args.csv_dir)
    if args.cmd == "suggest":
        return cmd_suggest(args.q, cfg)
    return cmd_batch(args.keywords_file, args.country, args.limit, cfg, args.out_dir)


if __name__ == "__main__":
    sys.exit(main())

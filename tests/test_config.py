from __future__ import annotations

import dataclasses

import pytest

from scrapers.config import STOPWORDS, AnalysisConfig, load_config


@pytest.fixture(autouse=True)
def _no_proxy_env(monkeypatch):
    monkeypatch.delenv("PROXY", raising=False)


def test_defaults() -> None:
    cfg = AnalysisConfig()
    assert cfg.title_boost == 3
    assert cfg.seed_weight == 6
    assert cfg.request_delay_ms == 700
    assert cfg.delay_jitter_ms == 600
    assert cfg.max_keywords == 120
    assert "android" in cfg.stopwords


def test_config_is_immutable() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        AnalysisConfig().title_boost = 10  # type: ignore[misc]


def test_bundled_yaml_matches_defaults() -> None:
    assert load_config() == AnalysisConfig()


def test_yaml_overrides_and_unknown_keys(tmp_path) -> None:
    p = tmp_path / "cfg.yml"
    p.write_text("title_boost: 5\nstopwords: [Foo, bar]\nnot_a_setting: 1\n", encoding="utf-8")
    cfg = load_config(p)
    assert cfg.title_boost == 5
    assert cfg.seed_weight == 10
    assert cfg.stopwords == frozenset({"foo", "bar"})
    assert cfg.max_limit == 50


def test_broken_or_missing_yaml_uses_defaults(tmp_path) -> None:
    p = tmp_path / "bad.yml"
    p.write_text("title_boost: [\n", encoding="utf-8")
    assert load_config(p) == AnalysisConfig()
    assert load_config(tmp_path / "missing.yml") == AnalysisConfig()


def test_proxy_env_wins(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("PROXY", "http://user:pw@proxy:8080")
    cfg = load_config(tmp_path / "missing.yml")
    assert cfg.proxy == "http://user:pw@proxy:8080"
    assert cfg.stopwords == STOPWORDS


def test_yaml_values_are_coerced_to_field_types(tmp_path) -> None:
    p = tmp_path / "cfg.yml"
    p.write_text(
        'max_limit: "40"\nsuggest_timeout: 3\ndefault_country: 44\ntitle_boost: lots\nheadless: "no"\n',
        encoding="utf-8",
    )
    cfg = load_config(p)
    assert cfg.max_limit == 40
    assert isinstance(cfg.suggest_timeout, float) and cfg.suggest_timeout == 3.0
    assert cfg.default_country == "44"
    # unusable values keep the default
    assert cfg.title_boost == 3
    assert cfg.headless is True


def test_coerced_limit_is_usable_in_min(tmp_path) -> None:
    p = tmp_path / "cfg.yml"
    p.write_text('max_limit: "50"\n', encoding="utf-8")
    assert min(load_config(p).max_limit, 80) == 50

from __future__ import annotations

import logging

import pytest

from scrapers.common import clean_text, round_half_up, setup_logger


@pytest.mark.parametrize(
    ("raw", "expected"),
    (
        (None, ""),
        ("", ""),
        ("   ", ""),
        ("  Photo\n\tEditor  ", "Photo Editor"),
        ("Photo\u200b Editor", "Photo Editor"),
        ("\ufeffBOM first", "BOM first"),
        ("zero\u200cwidth\u200djoin", "zerowidthjoin"),
    ),
)
def test_clean_text(raw, expected) -> None:
    assert clean_text(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ("a \u200b b", "  x\n\n y ", "\u2060lead", "already clean", "tabs\tand\u00a0nbsp"),
)
def test_clean_text_is_idempotent(raw) -> None:
    once = clean_text(raw)
    assert clean_text(once) == once
    assert "  " not in once


def test_setup_logger_does_not_stack_handlers() -> None:
    a = setup_logger("test-common-logger")
    b = setup_logger("test-common-logger")
    assert a is b
    assert len(a.handlers) == 1
    assert a.level == logging.INFO


@pytest.mark.parametrize(("x", "expected"), ((2.5, 3), (0.4, 0), (0.5, 1), (533333.33, 533333), (99.5, 100)))
def test_round_half_up(x, expected) -> None:
    assert round_half_up(x) == expected

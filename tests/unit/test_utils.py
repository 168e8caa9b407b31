"""Unit tests for query normalization and text helpers."""

import re

import pytest

from argo_assistant.utils import (
    chunk_text,
    clean_snippet,
    html_to_text_with_sections,
    normalize_query,
    normalize_url,
)

SAMPLES = [
    "What is the salinity of the Pacific Ocean?",
    "  Temp @ 10°N, 140°W -- in July!!  ",
    "Tabs\tand\nnewlines\r\nmixed",
    "¿Dónde está el Golfo de México?",
    "emoji 🌊🐋 waves",
    "x" * 250,
    "a, " * 80,
    "",
    "???",
]


@pytest.mark.parametrize("question", SAMPLES)
def test_normalize_query_output_shape(question):
    """Output is bounded, restricted to word chars, space, '.' and '-', without double spaces."""
    out = normalize_query(question)
    assert len(out) <= 100
    assert re.fullmatch(r"[\w .-]*", out)
    assert "  " not in out
    assert out == out.lower()


@pytest.mark.parametrize("question", SAMPLES)
def test_normalize_query_idempotent(question):
    """Normalizing a normalized query changes nothing."""
    once = normalize_query(question)
    assert normalize_query(once) == once


def test_normalize_query_keeps_dots_and_dashes():
    """Dots and dashes survive; other punctuation becomes a single space."""
    assert normalize_query("Mid-Ocean ridge: 2.5 km deep?") == "mid-ocean ridge 2.5 km deep"


def test_normalize_query_truncates_to_100_chars():
    """Long questions are cut to the first 100 characters."""
    assert normalize_query("b" * 150) == "b" * 100


def test_clean_snippet_strips_ellipsis_and_whitespace():
    """Ellipsis markers are removed and whitespace collapsed."""
    assert clean_snippet("  Sea surface\n temperature ... rises  ") == "Sea surface temperature rises"


def test_normalize_url_drops_fragment_and_trailing_slash():
    """Fragments and trailing slashes do not create distinct URLs."""
    assert normalize_url("https://oceanservice.noaa.gov/facts/#top") == "https://oceanservice.noaa.gov/facts"


def test_chunk_text_overlaps():
    """Chunks respect the size floor and overlap."""
    text = "a" * 500
    chunks = chunk_text(text, chunk_size=200, overlap=50)
    assert [len(c) for c in chunks] == [200, 200, 200]
    assert chunk_text("", 200, 50) == []


def test_html_to_text_with_sections():
    """Headings start sections; scripts are dropped."""
    html = (
        "<html><body><script>var x=1;</script>"
        "<h1>Tides</h1><p>Tides are caused by the moon.</p>"
        "<h2>Currents</h2><p>Currents move heat.</p><li>Gulf Stream</li>"
        "</body></html>"
    )
    assert html_to_text_with_sections(html) == [
        ("Tides", "Tides are caused by the moon."),
        ("Currents", "Currents move heat. Gulf Stream"),
    ]

"""Utility helpers for query normalization, snippet cleanup, HTML extraction, and chunking.

This module provides:
- normalize_query: bounded, punctuation-free lowercase form of a question for retrieval
- clean_snippet: whitespace/ellipsis cleanup for web search snippets
- stable_doc_id: stable SHA-1 based identifier for documents/URLs
- normalize_url: normalization to make URLs consistent for deduplication
- html_to_text_with_sections: HTML to (section, text) extraction using BeautifulSoup
- chunk_text/chunk_sections: simple fixed-size character chunking with overlap
"""
import hashlib
import re
from typing import List, Tuple

from bs4 import BeautifulSoup
from bs4.element import Tag

MAX_QUERY_CHARS = 100

_DISALLOWED = re.compile(r"[^\w\s.-]")
_WHITESPACE = re.compile(r"\s+")


def normalize_query(question: str, max_chars: int = MAX_QUERY_CHARS) -> str:
    """Normalize a question into a retrieval query.

    Lowercases, trims, replaces every character that is not a word character,
    whitespace, '.' or '-' with a space, collapses whitespace runs, and caps the
    length. Never used as the cache key.

    Args:
        question: Raw question text.
        max_chars: Length cap (100 by default).

    Returns:
        str: The normalized query. Normalizing it again returns it unchanged.
    """
    q = question.lower().strip()
    q = _DISALLOWED.sub(" ", q)
    q = _WHITESPACE.sub(" ", q).strip()
    return q[:max_chars].rstrip()


def clean_snippet(snippet: str) -> str:
    """Collapse whitespace and strip '...' markers from a search snippet."""
    s = (snippet or "").replace("...", " ").replace("…", " ")
    return _WHITESPACE.sub(" ", s).strip()


def stable_doc_id(s: str) -> str:
    """Compute a stable 40-char SHA-1 hex identifier for a string."""
    return hashlib.sha1(s.encode("utf-8")).hexdigest()[:40]


def normalize_url(u: str) -> str:
    """Normalize URLs by removing fragments and trailing slashes."""
    u = re.sub(r"#.*$", "", u)
    if len(u) > 1 and u.endswith("/"):
        u = u[:-1]
    return u


def html_to_text_with_sections(html: str) -> List[Tuple[str, str]]:
    """Convert HTML into (section_title, text_block) pairs.

    Headings (h1..h4) start new sections; paragraph-like elements are gathered
    into the current section. If no structure is detected, the whole page text
    becomes a single untitled block.

    Args:
        html: Raw HTML string.

    Returns:
        List[Tuple[str, str]]: Sequence of (section_title, text_block).
    """
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "noscript", "nav", "footer"]):
        tag.decompose()

    blocks: List[Tuple[str, str]] = []
    section = ""
    buffer: List[str] = []

    def flush() -> None:
        if buffer:
            body = _WHITESPACE.sub(" ", " ".join(buffer)).strip()
            if body:
                blocks.append((section, body))
            buffer.clear()

    root = soup.body if soup.body else soup
    for el in root.descendants:
        if not isinstance(el, Tag):
            continue
        if el.name in ("h1", "h2", "h3", "h4"):
            flush()
            section = el.get_text(" ", strip=True)
        elif el.name in ("p", "li", "td"):
            txt = el.get_text(" ", strip=True)
            if txt:
                buffer.append(txt)
    flush()

    if not blocks:
        body = _WHITESPACE.sub(" ", soup.get_text(" ", strip=True)).strip()
        if body:
            blocks = [("", body)]
    return blocks


def chunk_text(text: str, chunk_size: int, overlap: int) -> List[str]:
    """Split text into fixed-size character chunks with overlap.

    chunk_size is floored at 200 and overlap clamped to [0, chunk_size // 2].
    """
    if not text:
        return []
    chunk_size = max(200, chunk_size)
    overlap = max(0, min(overlap, chunk_size // 2))
    chunks: List[str] = []
    start = 0
    n = len(text)
    while start < n:
        end = min(n, start + chunk_size)
        chunks.append(text[start:end].strip())
        if end == n:
            break
        start = end - overlap
    return [c for c in chunks if c]


def chunk_sections(sections: List[Tuple[str, str]], chunk_size: int, overlap: int) -> List[Tuple[str, str]]:
    """Expand (section, text_block) pairs into (section, chunk) pairs."""
    out: List[Tuple[str, str]] = []
    for title, block in sections:
        for ch in chunk_text(block, chunk_size, overlap):
            out.append((title, ch))
    return out

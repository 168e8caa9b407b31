"""Oceanography reference crawler and ingestor.

Crawls pages breadth-first from seed URLs (same host as the seed only),
extracts text into sections, chunks content, embeds with OpenAI embeddings,
and stores Chunk rows into Postgres with pgvector. These rows are the internal
knowledge the retriever prefers over web search.

Main functions:
- extract_links: find and normalize same-host links from a page
- fetch: HTTP GET with basic headers and timeout
- ingest_page: parse, chunk, embed, and insert rows for a single page
- crawl_and_ingest: BFS crawl up to max_docs pages

Usage:
  python -m argo_assistant.ingestion.ingest_docs [--url URL ...] [--max-docs N]
"""
import argparse
import logging
import time
from collections import deque
from typing import Deque, List, Optional, Set, Tuple
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup
from sqlalchemy.orm import Session

from argo_assistant.config import settings
from argo_assistant.db import init_db, session_scope
from argo_assistant.embedding import embed_texts
from argo_assistant.log import configure_logging
from argo_assistant.models import Chunk
from argo_assistant.utils import (
    chunk_sections,
    html_to_text_with_sections,
    normalize_url,
    stable_doc_id,
)

logger = logging.getLogger(__name__)

HEADERS = {"User-Agent": "ARGO-Ingestor/1.0"}


def extract_links(base_url: str, html: str) -> List[str]:
    """Resolve, normalize and de-duplicate links on the same host as base_url."""
    host = urlparse(base_url).netloc
    soup = BeautifulSoup(html, "lxml")
    seen: Set[str] = set()
    out: List[str] = []
    for a in soup.find_all("a", href=True):
        u = normalize_url(urljoin(base_url, a["href"]))
        parsed = urlparse(u)
        if parsed.scheme not in ("http", "https") or parsed.netloc != host:
            continue
        if u not in seen:
            seen.add(u)
            out.append(u)
    return out


def fetch(url: str, timeout: int = 20) -> Tuple[int, str]:
    """GET a URL; returns (status code, body text if ok else '')."""
    resp = requests.get(url, headers=HEADERS, timeout=timeout)
    return resp.status_code, resp.text if resp.ok else ""


def ingest_page(db: Session, url: str, html: str) -> int:
    """Parse, chunk, embed and insert Chunk rows for one page.

    Returns:
        int: Number of chunk rows created.
    """
    soup = BeautifulSoup(html, "lxml")
    title = soup.title.string.strip()[:500] if soup.title and soup.title.string else ""

    chunks = chunk_sections(
        html_to_text_with_sections(html), settings.CHUNK_SIZE, settings.CHUNK_OVERLAP
    )
    if not chunks:
        return 0

    embeddings = embed_texts([c for (_, c) in chunks])
    doc_id = stable_doc_id(url)
    for i, ((section, content), emb) in enumerate(zip(chunks, embeddings)):
        db.add(
            Chunk(
                doc_id=doc_id,
                url=url,
                title=title,
                section=section[:500] if section else None,
                position=i,
                content=content,
                embedding=emb,
            )
        )
    return len(chunks)


def crawl_and_ingest(seed_urls: Optional[List[str]] = None, max_docs: Optional[int] = None) -> int:
    """Breadth-first crawl from seed URLs, ingesting each page.

    Args:
        seed_urls: Start pages (settings.DOCS_SEED_URLS by default).
        max_docs: Page budget (settings.MAX_DOCS by default).

    Returns:
        int: Number of pages ingested.
    """
    init_db()
    if seed_urls is None:
        seed_urls = [u.strip() for u in settings.DOCS_SEED_URLS.split(",") if u.strip()]
    max_docs = max_docs or settings.MAX_DOCS

    q: Deque[str] = deque(normalize_url(u) for u in seed_urls)
    visited: Set[str] = set()
    processed = 0
    t0 = time.time()

    with session_scope() as db:
        while q and processed < max_docs:
            url = q.popleft()
            if url in visited:
                continue
            visited.add(url)

            try:
                status, html = fetch(url)
            except requests.RequestException as e:
                logger.warning("Fetch failed for %s: %s", url, e)
                continue
            if status != 200 or not html:
                logger.info("Skipping %s (HTTP %d)", url, status)
                continue

            try:
                n = ingest_page(db, url, html)
                processed += 1
                logger.info("Ingested %d/%d %s -> %d chunks", processed, max_docs, url, n)
            except Exception:
                logger.exception("Ingest failed for %s", url)

            for nxt in extract_links(url, html):
                if nxt not in visited:
                    q.append(nxt)

    logger.info("Ingested %d pages in %.1fs", processed, time.time() - t0)
    return processed


def main():
    parser = argparse.ArgumentParser(description="Crawl oceanography pages into the vector index.")
    parser.add_argument("--url", action="append", help="Seed URL (repeatable); defaults to DOCS_SEED_URLS")
    parser.add_argument("--max-docs", type=int, default=None, help="Maximum pages to ingest")
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    args = parser.parse_args()

    configure_logging(args.log_level)
    try:
        crawl_and_ingest(args.url, args.max_docs)
    except Exception:
        logger.exception("Ingestion failed")
        raise


if __name__ == "__main__":
    main()

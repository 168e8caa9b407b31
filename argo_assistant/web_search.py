"""Google Custom Search client used as the retrieval fallback.

Only result titles and snippets are used (never full pages) to keep prompts
small. Network and HTTP errors are raised to the caller; the retrieval layer
turns them into an empty, degraded step.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from argo_assistant.config import settings
from argo_assistant.utils import clean_snippet

logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
DOMAIN_BIAS = "oceanography ocean data"
MAX_SNIPPETS = 3
SEPARATOR = "\n\n---\n\n"


def search_google(
    query: str,
    num: Optional[int] = None,
    timeout: Optional[int] = None,
    session: Optional[requests.Session] = None,
) -> List[Dict[str, Any]]:
    """Run a safe-search Google CSE query biased toward oceanography.

    Args:
        query: Normalized query text; domain bias terms are appended.
        num: Number of results to request (settings.SEARCH_NUM_RESULTS by default).
        timeout: Request timeout in seconds (settings.SEARCH_TIMEOUT_SECONDS by default).
        session: Optional requests session (tests, connection reuse).

    Returns:
        List[Dict[str, Any]]: Raw result items ('title', 'snippet', 'link', ...).
    """
    params = {
        "key": settings.GOOGLE_API_KEY,
        "cx": settings.GOOGLE_CSE_ID,
        "q": f"{query} {DOMAIN_BIAS}",
        "num": num or settings.SEARCH_NUM_RESULTS,
        "safe": "active",
    }
    http = session or requests
    logger.info("Searching Google for: %s", query)
    resp = http.get(SEARCH_URL, params=params, timeout=timeout or settings.SEARCH_TIMEOUT_SECONDS)
    resp.raise_for_status()
    return resp.json().get("items") or []


def format_results(items: List[Dict[str, Any]], limit: int = MAX_SNIPPETS) -> str:
    """Join the top results into 'Title/Snippet' blocks separated by a rule."""
    blocks = []
    for item in items[:limit]:
        title = item.get("title", "")
        snippet = clean_snippet(item.get("snippet", ""))
        blocks.append(f"Title: {title}\nSnippet: {snippet}")
    return SEPARATOR.join(blocks)

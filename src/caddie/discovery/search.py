"""Resolve a golf course's official website from web search results."""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from ..config import SEARCH_BASE_URL
from ..logging import get_logger

logger = get_logger(__name__)

# Result links on the search engine's plain HTML page
RESULT_LINK_PATTERN = re.compile(r'<a href="/url\?q=(https?://[^&"]+)')

NO_CONTENT_REASON = "No content returned from browsing Google search results."
NO_RESULT_REASON = "No golf course website URL found in search results."


@dataclass(frozen=True)
class SiteLookup:
    """Outcome of an official-site lookup: the URL, or why there is none."""

    url: Optional[str]
    reason: str = ""
    content_retrieved: bool = True


def search_query(course_name: str) -> str:
    return f"{course_name} golf course official website"


def build_search_url(course_name: str, base_url: str = SEARCH_BASE_URL) -> str:
    """URL-encoded search query appended to the search endpoint."""
    return f"{base_url}?q={quote(search_query(course_name), safe='')}"


def extract_first_result_url(html: Optional[str]) -> Optional[str]:
    if not html:
        return None
    match = RESULT_LINK_PATTERN.search(html)
    return match.group(1) if match else None


def resolve_official_site(browser, course_name: str, cache=None) -> SiteLookup:
    """
    Search for the course and take the first result as its official site.

    Args:
        browser: Object exposing fetch_html(url) -> str
        course_name: Golf course name as given by the user
        cache: Optional Cache for search result HTML

    Returns:
        SiteLookup with the URL, or a reason string when nothing was found
    """
    search_url = build_search_url(course_name)
    logger.info(f"[SEARCH] Search URL: {search_url}")

    html = cache.get_search(search_url) if cache else None
    if not html:
        html = browser.fetch_html(search_url)
        if cache and html:
            cache.set_search(search_url, html)

    if not html:
        logger.info(f"[SEARCH] {NO_CONTENT_REASON}")
        return SiteLookup(url=None, reason=NO_CONTENT_REASON, content_retrieved=False)

    course_url = extract_first_result_url(html)
    if not course_url:
        logger.info(f"[SEARCH] {NO_RESULT_REASON}")
        return SiteLookup(url=None, reason=NO_RESULT_REASON)

    logger.info(f"[SEARCH] Extracted course URL: {course_url}")
    return SiteLookup(url=course_url)

"""Link extraction from HTML pages using BeautifulSoup."""

from bs4 import BeautifulSoup
from typing import List
from urllib.parse import parse_qsl, urlencode, urljoin, urlparse, urlunparse

from ..logging import get_logger

logger = get_logger(__name__)

MAX_EXTRACTED_LINKS = 100

TRACKING_PARAMS = {
    "gclid", "fbclid", "msclkid", "twclid", "li_fat_id",
    "_ga", "_gid", "ref", "source", "affiliate_id",
}


def normalize_link(url: str) -> str:
    """Drop the fragment and tracking query parameters (utm_*, gclid, ...)."""
    parsed = urlparse(url)
    query = [
        (key, value)
        for key, value in parse_qsl(parsed.query, keep_blank_values=True)
        if key.lower() not in TRACKING_PARAMS and not key.lower().startswith("utm_")
    ]
    return urlunparse(parsed._replace(query=urlencode(query), fragment=""))


def extract_links(html: str, base_url: str, max_links: int = MAX_EXTRACTED_LINKS) -> List[str]:
    """
    Extract absolute http(s) URLs from an HTML page.

    Args:
        html: HTML content
        base_url: Base URL for resolving relative links
        max_links: Maximum number of links to return

    Returns:
        Links in document order, deduplicated and limited
    """
    if not html or not base_url:
        return []

    soup = BeautifulSoup(html, "lxml")
    links: List[str] = []
    seen = set()

    for anchor in soup.find_all("a", href=True):
        href = anchor.get("href", "").strip()
        if not href or href.startswith("#") or href.startswith("javascript:"):
            continue

        absolute_url = urljoin(base_url, href)
        if urlparse(absolute_url).scheme not in ("http", "https"):
            continue

        normalized = normalize_link(absolute_url)
        if normalized in seen:
            continue
        seen.add(normalized)
        links.append(normalized)
        if len(links) >= max_links:
            break

    logger.debug(f"Extracted {len(links)} links from {base_url}")
    return links

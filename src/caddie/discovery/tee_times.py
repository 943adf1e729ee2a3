"""Discover a golf course's tee time booking page and optionally prime it with a date."""

import time
from dataclasses import dataclass
from typing import Optional, Union

from ..config import (
    BROWSER_TIMEOUT,
    CLICK_NAVIGATION_TIMEOUT,
    DATE_INPUT_WAIT_TIMEOUT,
    DATE_SETTLE_SECONDS,
    ENTRY_POINT_WAIT_TIMEOUT,
)
from .matcher import CLICK_ONLY, DATE_SELECTORS, find_date_input, find_entry_point, first_matching_index
from .search import resolve_official_site
from ..logging import get_logger

logger = get_logger(__name__)

# Categories scanned for an entry point, in order
ENTRY_POINT_CATEGORIES = ("a", "button")
CLICKABLE_SELECTOR = "a,button"

NO_ENTRY_POINT_REASON = "No tee times link or button found on the landing page."


@dataclass(frozen=True)
class Success:
    url: str
    date_applied: bool = False

    def message(self) -> str:
        return self.url


@dataclass(frozen=True)
class NoEntryPointFound:
    reason: str = NO_ENTRY_POINT_REASON

    def message(self) -> str:
        return self.reason


@dataclass(frozen=True)
class NoContentRetrieved:
    reason: str

    def message(self) -> str:
        return self.reason


@dataclass(frozen=True)
class NavigationError:
    detail: str

    def message(self) -> str:
        return f"Error finding tee times: {self.detail}"


DiscoveryResult = Union[Success, NoEntryPointFound, NoContentRetrieved, NavigationError]


def _locate_entry_point(session) -> Optional[str]:
    """Scan links, then buttons; an href from either category ends the scan."""
    for category in ENTRY_POINT_CATEGORIES:
        logger.info(f"[TEE_TIMES] Waiting for selector: {category}")
        if not session.wait_for_selector(category, timeout=ENTRY_POINT_WAIT_TIMEOUT):
            logger.info(f"[TEE_TIMES] No elements found for selector: {category}")
            continue

        outcome = find_entry_point(session.snapshot(category))
        logger.info(f"[TEE_TIMES] Entry point for selector {category}: {outcome}")
        if outcome and outcome != CLICK_ONLY:
            return outcome
    return None


def _click_entry_point(session) -> bool:
    index = first_matching_index(session.snapshot(CLICKABLE_SELECTOR))
    if index is None:
        return False
    logger.info(f"[TEE_TIMES] Clicking element {index} and waiting for navigation")
    session.click_and_wait_for_navigation(CLICKABLE_SELECTOR, index, timeout=CLICK_NAVIGATION_TIMEOUT)
    return True


def _prime_date(session, date: str, settle_seconds: float) -> bool:
    """Set the date on the first date input that accepts it; never fatal."""

    def apply(selector: str) -> bool:
        logger.debug(f"[TEE_TIMES] Trying date selector: {selector}")
        if not session.wait_for_selector(selector, timeout=DATE_INPUT_WAIT_TIMEOUT):
            return False
        if not session.is_input(selector):
            return False
        session.set_input_value(selector, date)
        return True

    selector = find_date_input(apply, DATE_SELECTORS)
    if selector is None:
        logger.info("[TEE_TIMES] Could not set date on page.")
        return False

    logger.info(f"[TEE_TIMES] Date set using selector: {selector}, waiting {settle_seconds}s")
    if settle_seconds > 0:
        time.sleep(settle_seconds)
    return True


def resolve_tee_times_url(
    browser,
    course_name: str,
    date: Optional[str] = None,
    cache=None,
    settle_seconds: float = DATE_SETTLE_SECONDS,
) -> DiscoveryResult:
    """
    Find the tee times page of a golf course.

    Searches for the course's official site, opens it, follows the first link
    or button that looks like a tee time entry point and, when a date is given,
    fills in the first date input found. The page session is closed on every
    path out of this function.

    Args:
        browser: Object exposing fetch_html(url) and new_page() -> PageSession
        course_name: Golf course name
        date: Optional ISO date (e.g. "2024-06-01") to put in the date input
        cache: Optional search cache
        settle_seconds: Pause after setting the date so the page can react

    Returns:
        DiscoveryResult; Success carries the final page URL
    """
    logger.info(f"[TEE_TIMES] Starting search for course: {course_name}, date: {date}")

    try:
        site = resolve_official_site(browser, course_name, cache=cache)
    except Exception as e:
        logger.error(f"[TEE_TIMES] Site lookup failed: {e}", exc_info=True)
        return NavigationError(detail=str(e))

    if not site.url:
        if not site.content_retrieved:
            return NoContentRetrieved(reason=site.reason)
        return NoEntryPointFound(reason=site.reason)

    try:
        session = browser.new_page()
    except Exception as e:
        logger.error(f"[TEE_TIMES] Could not open page: {e}", exc_info=True)
        return NavigationError(detail=str(e))

    with session:
        try:
            logger.info(f"[TEE_TIMES] Navigating to course URL: {site.url}")
            session.goto(site.url, timeout=BROWSER_TIMEOUT)

            href = _locate_entry_point(session)
            if href:
                logger.info(f"[TEE_TIMES] Navigating directly to tee times href: {href}")
                session.goto(href, timeout=BROWSER_TIMEOUT)
            else:
                logger.info("[TEE_TIMES] No href found, attempting to click button/link with matching text...")
                if not _click_entry_point(session):
                    logger.info(f"[TEE_TIMES] {NO_ENTRY_POINT_REASON}")
                    return NoEntryPointFound()

            date_applied = False
            if date:
                date_applied = _prime_date(session, date, settle_seconds)

            final_url = session.url
            logger.info(f"[TEE_TIMES] Final URL: {final_url}")
            return Success(url=final_url, date_applied=date_applied)

        except Exception as e:
            logger.error(f"[TEE_TIMES] Error finding tee times: {e}", exc_info=True)
            return NavigationError(detail=str(e))

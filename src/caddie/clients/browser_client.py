"""Playwright browser client: page sessions and sequential browsing."""

import time
from typing import Callable, List, Optional, Union

from playwright.sync_api import sync_playwright, Page, TimeoutError as PlaywrightTimeoutError

from ..config import BROWSER_HEADLESS, BROWSER_TIMEOUT
from ..discovery.matcher import ElementSnapshot
from ..extract.html_extract import extract_links
from .fetch_client import FetchClient
from ..logging import get_logger

logger = get_logger(__name__)

# Runs in the page: describe each matched element for the heuristic matcher
_SNAPSHOT_JS = """
els => els.map(el => {
    const tag = el.tagName.toLowerCase();
    const nested = tag === "a" ? null : el.querySelector("a");
    return {
        tag: tag,
        text: el.textContent || "",
        href: tag === "a" ? (el.href || null) : null,
        nestedHref: nested ? (nested.href || null) : null,
    };
})
"""

_CLICK_JS = "([selector, index]) => document.querySelectorAll(selector)[index].click()"

_IS_INPUT_JS = "el => el.tagName.toLowerCase() === 'input'"

# Listeners on the page only react to events, not to a bare value assignment
_SET_VALUE_JS = """
(el, value) => {
    el.value = value;
    el.dispatchEvent(new Event("input", { bubbles: true }));
    el.dispatchEvent(new Event("change", { bubbles: true }));
}
"""


class PageSession:
    """
    One live browser page, exclusively owned by the operation that opened it.

    Use as a context manager; close() releases the page and the browser behind
    it exactly once, however many times it is called.
    """

    def __init__(self, page: Page, release: Optional[Callable[[], None]] = None):
        self._page = page
        self._release = release
        self.closed = False

    @property
    def url(self) -> str:
        return self._page.url

    def goto(self, url: str, wait_until: str = "domcontentloaded", timeout: int = BROWSER_TIMEOUT) -> None:
        nav_start = time.time()
        self._page.goto(url, wait_until=wait_until, timeout=timeout)
        nav_time = (time.time() - nav_start) * 1000
        logger.debug(f"[SESSION] Navigated to {url} (wait_until={wait_until}, took {nav_time:.0f}ms)")

    def wait_for_selector(self, selector: str, timeout: int, visible: bool = True) -> bool:
        """Wait for selector; a timeout is reported as False, not raised."""
        try:
            self._page.wait_for_selector(selector, state="visible" if visible else "attached", timeout=timeout)
            return True
        except PlaywrightTimeoutError:
            logger.debug(f"[SESSION] No element for {selector} within {timeout}ms")
            return False

    def snapshot(self, selector: str) -> List[ElementSnapshot]:
        raw = self._page.eval_on_selector_all(selector, _SNAPSHOT_JS)
        return [
            ElementSnapshot(
                tag=item.get("tag", ""),
                text=item.get("text", ""),
                href=item.get("href"),
                nested_href=item.get("nestedHref"),
            )
            for item in raw
        ]

    def click_and_wait_for_navigation(self, selector: str, index: int, timeout: int) -> None:
        """Click the index-th element matching selector and wait for the navigation it starts."""
        with self._page.expect_navigation(wait_until="domcontentloaded", timeout=timeout):
            self._page.evaluate(_CLICK_JS, [selector, index])

    def is_input(self, selector: str) -> bool:
        return bool(self._page.eval_on_selector(selector, _IS_INPUT_JS))

    def set_input_value(self, selector: str, value: str) -> None:
        self._page.eval_on_selector(selector, _SET_VALUE_JS, value)

    def content(self) -> str:
        return self._page.content()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._page.close()
        finally:
            if self._release:
                self._release()
        logger.debug("[SESSION] Page closed")

    def __enter__(self) -> "PageSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class BrowserClient:
    """Client for driving pages with Playwright."""

    def __init__(self, fetch_client: Optional[FetchClient] = None, headless: bool = BROWSER_HEADLESS):
        self.fetch_client = fetch_client or FetchClient()
        self.headless = headless

    def new_page(self) -> PageSession:
        """
        Launch a browser and open one page on it.

        Playwright's sync API binds objects to the thread that created them, so
        every session gets its own Playwright instance and browser.
        """
        playwright = sync_playwright().start()
        try:
            browser = playwright.chromium.launch(headless=self.headless)
            page = browser.new_page()
            page.set_default_timeout(BROWSER_TIMEOUT)
        except Exception:
            playwright.stop()
            raise

        def release() -> None:
            try:
                browser.close()
            finally:
                playwright.stop()

        return PageSession(page, release=release)

    def fetch_html(self, url: str) -> str:
        """Raw HTML of a URL without rendering; empty string when nothing came back."""
        result = self.fetch_client.fetch(url)
        if result.get("error"):
            logger.warning(f"[FETCH] No HTML for {url}: {result['error']}")
        return result.get("html") or ""

    def browse(self, urls: List[str]) -> List[Union[str, List[str]]]:
        """
        Visit URLs one at a time, in order.

        Args:
            urls: URLs to visit

        Returns:
            One entry per URL: list of link URLs, or an error sentence
        """
        responses: List[Union[str, List[str]]] = []
        for url in urls:
            start_time = time.time()
            try:
                with self.new_page() as session:
                    session.goto(url, wait_until="load")
                    session.wait_for_selector("body", timeout=BROWSER_TIMEOUT, visible=False)
                    responses.append(extract_links(session.content(), session.url))
                total_time = (time.time() - start_time) * 1000
                logger.info(f"[BROWSE] Completed {url} (total: {total_time:.0f}ms)")
            except Exception as e:
                logger.error(f"[BROWSE] Error browsing URL {url}: {e}", exc_info=True)
                responses.append(f"Error browsing URL {url}: {e}")
        return responses

"""Deterministic stand-ins for the browser, page sessions and the LLM."""

import pytest

from caddie.discovery.matcher import ElementSnapshot


class FakeSession:
    """
    Page session over a dict of fake pages.

    Each fake page may hold:
      elements: ElementSnapshot list in document order
      click_target: URL reached by clicking an element
      date_fields: {selector: is_input}
      rejected_dates: selectors whose value cannot be written
      fail_on: method name that raises RuntimeError on this page
    """

    def __init__(self, pages, goto_error=None):
        self.pages = pages
        self.goto_error = goto_error
        self.url = "about:blank"
        self.calls = []
        self.close_count = 0
        self.values = {}
        self.events = []

    def _page(self):
        return self.pages.get(self.url, {})

    def _maybe_fail(self, method):
        if self._page().get("fail_on") == method:
            raise RuntimeError(f"{method} blew up")

    def goto(self, url, wait_until="domcontentloaded", timeout=None):
        self.calls.append(("goto", url))
        if self.goto_error and url in self.goto_error:
            raise TimeoutError(f"Timeout navigating to {url}")
        self.url = url

    def wait_for_selector(self, selector, timeout, visible=True):
        self.calls.append(("wait_for_selector", selector))
        self._maybe_fail("wait_for_selector")
        if selector in self._page().get("date_fields", {}):
            return True
        return bool(self.snapshot(selector))

    def snapshot(self, selector):
        self._maybe_fail("snapshot")
        tags = {tag.strip() for tag in selector.split(",")}
        return [el for el in self._page().get("elements", []) if el.tag in tags]

    def click_and_wait_for_navigation(self, selector, index, timeout):
        self.calls.append(("click", selector, index))
        self.calls.append(("wait_for_navigation", timeout))
        self.url = self._page()["click_target"]

    def is_input(self, selector):
        return self._page().get("date_fields", {}).get(selector, False)

    def set_input_value(self, selector, value):
        if selector in self._page().get("rejected_dates", ()):
            raise RuntimeError(f"Cannot write {selector}")
        self.values[selector] = value
        self.events.extend(["input", "change"])

    def close(self):
        self.close_count += 1

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class FakeBrowser:
    def __init__(self, search_html="", pages=None, goto_error=None):
        self.search_html = search_html
        self.pages = pages or {}
        self.goto_error = goto_error
        self.fetched = []
        self.sessions = []
        self.browsed = []

    def fetch_html(self, url):
        self.fetched.append(url)
        return self.search_html

    def new_page(self):
        session = FakeSession(self.pages, goto_error=self.goto_error)
        self.sessions.append(session)
        return session

    def browse(self, urls):
        self.browsed.append(list(urls))
        return [[f"{url}about"] for url in urls]


class FakeCache:
    def __init__(self):
        self.store = {}

    def get_search(self, query):
        return self.store.get(query)

    def set_search(self, query, html):
        self.store[query] = html


class ScriptedChatClient:
    """Returns the scripted assistant messages in order."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.requests = []

    def chat(self, messages, tools=None):
        self.requests.append({"messages": list(messages), "tools": tools})
        if not self.replies:
            return {"role": "assistant", "content": "done"}
        return self.replies.pop(0)


def _search_page(*urls):
    links = "".join(f'<a href="/url?q={url}&amp;sa=U&amp;ved=x">result</a>' for url in urls)
    return f"<html><body><div id=\"search\">{links}</div></body></html>"


@pytest.fixture
def make_browser():
    return FakeBrowser


@pytest.fixture
def fake_cache():
    return FakeCache()


@pytest.fixture
def make_chat_client():
    return ScriptedChatClient


@pytest.fixture
def search_page():
    """Search result HTML whose result links point at the given URLs."""
    return _search_page


@pytest.fixture
def pebble_creek_pages():
    """Landing page with a direct tee times link, and the booking page with a date input."""
    return {
        "https://www.pebblecreek-golf.example/": {
            "elements": [
                ElementSnapshot(tag="a", text="About", href="https://pebblecreek-golf.example/about"),
                ElementSnapshot(tag="a", text="Book Tee Times", href="https://pebblecreek-golf.example/tee-times"),
                ElementSnapshot(tag="button", text="Reserve"),
            ],
        },
        "https://pebblecreek-golf.example/tee-times": {
            "elements": [ElementSnapshot(tag="button", text="Search")],
            "date_fields": {'input[type="date"]': True},
        },
    }

"""Tests for the entry point and date input heuristics."""

import pytest

from caddie.discovery.matcher import (
    CLICK_ONLY,
    DATE_SELECTORS,
    ElementSnapshot,
    find_date_input,
    find_entry_point,
    first_matching_index,
)


def test_no_matching_text_returns_none():
    elements = [
        ElementSnapshot(tag="a", text="Home", href="https://example.com/"),
        ElementSnapshot(tag="a", text="Membership", href="https://example.com/members"),
        ElementSnapshot(tag="button", text="Subscribe"),
    ]
    assert find_entry_point(elements) is None


def test_empty_element_list_returns_none():
    assert find_entry_point([]) is None


def test_matching_link_returns_its_href():
    elements = [
        ElementSnapshot(tag="a", text="Contact", href="https://example.com/contact"),
        ElementSnapshot(tag="a", text="  Book Tee Times  ", href="https://example.com/tee-times"),
    ]
    assert find_entry_point(elements) == "https://example.com/tee-times"


@pytest.mark.parametrize("text", ["TEE TIMES", "Booking tee times", "Reserve now", "Online Tee Times"])
def test_pattern_is_case_insensitive(text):
    elements = [ElementSnapshot(tag="a", text=text, href="https://example.com/book")]
    assert find_entry_point(elements) == "https://example.com/book"


def test_button_with_nested_link_returns_nested_href():
    elements = [ElementSnapshot(tag="button", text="Tee Times", nested_href="https://example.com/teesheet")]
    assert find_entry_point(elements) == "https://example.com/teesheet"


def test_button_without_nested_link_is_click_only():
    elements = [ElementSnapshot(tag="BUTTON", text="Reserve")]
    assert find_entry_point(elements) == CLICK_ONLY


def test_anchor_without_href_is_click_only():
    elements = [ElementSnapshot(tag="a", text="Tee Times", href=None)]
    assert find_entry_point(elements) == CLICK_ONLY


def test_first_match_wins():
    elements = [
        ElementSnapshot(tag="button", text="Reserve"),
        ElementSnapshot(tag="a", text="Tee Times", href="https://example.com/tee-times"),
    ]
    assert find_entry_point(elements) == CLICK_ONLY


def test_matching_element_of_other_tag_is_skipped():
    elements = [
        ElementSnapshot(tag="div", text="Tee times are busy on weekends"),
        ElementSnapshot(tag="a", text="Reserve", href="https://example.com/reserve"),
    ]
    assert find_entry_point(elements) == "https://example.com/reserve"


def test_first_matching_index():
    elements = [
        ElementSnapshot(tag="a", text="News"),
        ElementSnapshot(tag="button", text="Reserve"),
        ElementSnapshot(tag="a", text="Tee Times"),
    ]
    assert first_matching_index(elements) == 1
    assert first_matching_index(elements[:1]) is None


@pytest.mark.parametrize("first_present", range(len(DATE_SELECTORS)))
def test_find_date_input_respects_priority(first_present):
    probed = []

    def probe(selector):
        probed.append(selector)
        # every selector from first_present on resolves
        return DATE_SELECTORS.index(selector) >= first_present

    assert find_date_input(probe) == DATE_SELECTORS[first_present]
    assert probed == list(DATE_SELECTORS[: first_present + 1])


def test_find_date_input_none_when_nothing_resolves():
    assert find_date_input(lambda selector: False) is None


def test_find_date_input_treats_probe_errors_as_miss():
    def probe(selector):
        if selector == DATE_SELECTORS[0]:
            raise RuntimeError("detached")
        return selector == DATE_SELECTORS[1]

    assert find_date_input(probe) == DATE_SELECTORS[1]

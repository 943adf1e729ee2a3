"""Markup-independent heuristics for tee time entry points and date inputs."""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..logging import get_logger

logger = get_logger(__name__)

# Visible text that marks a link or button leading to the booking flow
ENTRY_POINT_PATTERN = re.compile(r"tee times|book(ing)? tee times|reserve", re.IGNORECASE)

# Returned when a matching element has no usable href and must be clicked
CLICK_ONLY = "click-only"

# Priority order: explicit date inputs, name/id hints, date-picker classes, aria labels
DATE_SELECTORS = (
    'input[type="date"]',
    'input[name*="date"]',
    'input[id*="date"]',
    ".datepicker",
    ".date-picker",
    '[aria-label*="date"]',
)


@dataclass(frozen=True)
class ElementSnapshot:
    """Interactive element as seen in the page: tag, visible text and link target."""

    tag: str
    text: str = ""
    href: Optional[str] = None
    nested_href: Optional[str] = None  # href of the first <a> inside a button


def matches_entry_point(text: Optional[str]) -> bool:
    return bool(ENTRY_POINT_PATTERN.search(text or ""))


def first_matching_index(elements: Sequence[ElementSnapshot]) -> Optional[int]:
    """Index of the first element whose text looks like an entry point."""
    for index, element in enumerate(elements):
        if matches_entry_point(element.text):
            return index
    return None


def find_entry_point(elements: Sequence[ElementSnapshot]) -> Optional[str]:
    """
    Find the tee times entry point among interactive elements.

    Elements are scanned in document order and the first one whose text matches
    ENTRY_POINT_PATTERN decides the outcome. Matching elements that are neither
    links nor buttons are skipped.

    Args:
        elements: Element snapshots in document order

    Returns:
        The href to follow, CLICK_ONLY if the element has to be clicked, or None
    """
    for element in elements:
        if not matches_entry_point(element.text):
            continue

        tag = element.tag.lower()
        if tag == "a":
            return element.href or CLICK_ONLY
        if tag == "button":
            return element.nested_href or CLICK_ONLY

    return None


def find_date_input(
    probe: Callable[[str], bool],
    selectors: Sequence[str] = DATE_SELECTORS,
) -> Optional[str]:
    """
    Pick the first date selector that resolves to an input element.

    Args:
        probe: Answers whether a selector resolves, within its own bounded wait,
            to an existing input-tagged element
        selectors: Candidate selectors in priority order

    Returns:
        The winning selector, or None if no strategy resolved
    """
    for selector in selectors:
        try:
            if probe(selector):
                logger.debug(f"Date input resolved with selector {selector}")
                return selector
        except Exception as e:
            logger.debug(f"Date selector {selector} failed: {e}")
    return None

"""
Per-site selector and extraction tables for the automation targets.

Both sites are scraped from rendered markup, so they break whenever the
sites change. Each table carries a version; markup drift is fixed by adding
a new table here, not by touching the workflows.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class RidingSitePatterns:
    """Elections BC "find my electoral district" lookup."""

    version: str
    url: str
    input_selectors: tuple[str, ...]  # Probed in order; first hit wins
    suggestion_selector: str
    result_marker: str
    primary: re.Pattern[str]
    secondary: re.Pattern[str]


@dataclass(frozen=True)
class PropertySitePatterns:
    """BC Assessment property search."""

    version: str
    url: str
    disclaimer_selector: str
    search_input_selector: str
    suggestion_selector: str
    value_selector: str
    currency: re.Pattern[str]


RIDING_SITE_V1 = RidingSitePatterns(
    version="2024-provincial",
    url="https://mydistrict.elections.bc.ca/",
    input_selectors=(
        'input[placeholder*="address" i]',
        'input[aria-label*="address" i]',
        'input[type="search"]',
        "#address-input",
        "input.search-input",
        'input[type="text"]',
        "input",
    ),
    suggestion_selector=(
        '[role="option"], .autocomplete-suggestion, .suggestion-item, '
        ".pac-item, .ui-menu-item"
    ),
    result_marker="Your electoral district",
    # "Your electoral district for the 2024 Provincial Election will be: Surrey-Fleetwood (SRF)"
    primary=re.compile(
        r"electoral district.*?will be:\s*"
        r"(?P<riding>[^\n(]+?(?:\s*\([A-Z]{2,4}\))?)[ \t]*(?:\r?\n|$)",
        re.IGNORECASE | re.DOTALL,
    ),
    # Any "Name (ABC)" fragment on a single line
    secondary=re.compile(
        r"(?P<riding>[A-Z][\w.'’]*(?:[ \-–][A-Z][\w.'’]*)* \([A-Z]{3}\))"
    ),
)


PROPERTY_SITE_V1 = PropertySitePatterns(
    version="2024",
    url="https://www.bcassessment.ca/",
    disclaimer_selector='button:has-text("Agree"), a:has-text("Agree"), input[value*="Agree" i]',
    search_input_selector="#rsbSearch",
    suggestion_selector='[role="option"], .ui-menu-item, .ui-autocomplete li',
    value_selector="#lblTotalAssessedValue",
    currency=re.compile(r"\$\s?\d{1,3}(?:,\d{3})+(?:\.\d{2})?"),
)

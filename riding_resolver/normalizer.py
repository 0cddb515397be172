"""
Address normalization for third-party lookup forms.

Lookup sites expect BC-style unit addresses (``2104-738 Broughton Street``)
and choke on ``Suite 2104`` fragments or trailing localities. This module
rewrites the common variants and leaves everything else merely trimmed.
"""

from __future__ import annotations

import re

from .models import AddressQuery

# "Suite 2104", ", Apt. 5B", " #12"; the marker must follow a separator
_UNIT_MARKER = re.compile(
    r"(?:^|[\s,]+)(?:(?:suite|apt|apartment|unit)\b\.?|#)\s*#?\s*(?P<unit>[A-Za-z0-9]+)\b",
    re.IGNORECASE,
)

# Already in unit-street format: "123-456 Main St"
_CANONICAL_PREFIX = re.compile(r"^\d+[A-Za-z]?-\d+")

_STREET_NUMBER = re.compile(r"^(?P<number>\d+[A-Za-z]?)\s+(?P<street>.+)$")

_LEADING_UNIT_TOKEN = re.compile(
    r"^(?:(?:suite|apt|apartment|unit)\b\.?|#)\s*#?\s*[A-Za-z0-9]*[\s,]*",
    re.IGNORECASE,
)


def normalize_address(address: str) -> str:
    """Rewrite a free-text address into the form lookup sites accept.

    Example:
        "738 Broughton Street, Suite 2104, Vancouver" → "2104-738 Broughton Street"
        "123-456 Main St" → "123-456 Main St"  (already canonical)
    """
    return parse_address(address).canonical


def parse_address(address: str) -> AddressQuery:
    """Normalize an address and keep the captured unit alongside it."""
    raw = address or ""
    text = raw.strip()

    unit: str | None = None
    marker = _UNIT_MARKER.search(text)
    if marker:
        unit = marker.group("unit")
        text = (text[: marker.start()] + text[marker.end():]).strip(" ,")
    elif _CANONICAL_PREFIX.match(text):
        return AddressQuery(raw=raw, canonical=text)

    if unit:
        street_part = text.split(",", 1)[0].strip()
        match = _STREET_NUMBER.match(street_part)
        if match:
            rest = match.group("street").replace(",", "").strip()
            return AddressQuery(
                raw=raw,
                canonical=f"{unit}-{match.group('number')} {rest}",
                unit=unit,
            )
        # No street number to attach the unit to; keep the marker in place
        return AddressQuery(raw=raw, canonical=raw.strip(), unit=unit)

    text = _LEADING_UNIT_TOKEN.sub("", text)
    return AddressQuery(raw=raw, canonical=text.strip())

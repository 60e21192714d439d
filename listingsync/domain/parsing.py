# listingsync/domain/parsing.py
"""
Field extractors: raw text fragments from listing emails -> typed values.

Every function here is total. A non-match comes back as None (or an empty
dict for specs) and the caller decides whether that disqualifies a card.
"""
from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from .types import ListingSource, PriceChange

PRICE_RE = re.compile(r"\$\s?\d[\d,]*(?:\.\d+)?(?![\d.,]*\s?[KkMm]\b)")

BEDS_RE = re.compile(r"(\d+)\s*(?:bedrooms?|beds?|bds?|br)(?![a-z])", re.I)
BATHS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:bathrooms?|baths?|ba)(?![a-z])", re.I)
SQFT_RE = re.compile(r"(\d[\d,]*)\s*(?:sqft|sq\.?\s*ft\.?)", re.I)
ACRES_RE = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*(?:acres?|ac\.?)(?![a-z])", re.I)

# "Price cut: $2K (11/5)"
PRICE_CHANGE_RE = re.compile(r"\$(\d+(?:\.\d+)?)\s*K\s*\((\d{1,2})/(\d{1,2})\)", re.I)

LISTING_ID_PATTERNS: dict[ListingSource, re.Pattern[str]] = {
    ListingSource.zillow: re.compile(r"/(\d+)_zpid"),
    ListingSource.redfin: re.compile(r"/home/(\d+)"),
    ListingSource.realtor: re.compile(r"M(\d+-\d+)"),
    ListingSource.land: re.compile(r"/(\d+)/?(?:[?#]|$)"),
}

# Sender is checked against every source first, then the URL.
SOURCE_MARKERS: dict[ListingSource, tuple[str, ...]] = {
    ListingSource.zillow: ("zillow",),
    ListingSource.redfin: ("redfin",),
    ListingSource.realtor: ("realtor", "move.com"),
    ListingSource.land: ("land.com", "landwatch"),
}


def to_int(x: Any) -> int | None:
    if x is None or x == "":
        return None
    try:
        return int(float(str(x).replace(",", "")))
    except (TypeError, ValueError):
        return None


def to_float(x: Any) -> float | None:
    if x is None or x == "":
        return None
    try:
        return float(str(x).replace(",", ""))
    except (TypeError, ValueError):
        return None


def parse_price(text: str | None) -> Decimal | None:
    """
    "$1,234,567" -> Decimal("1234567"). None when no digits survive cleaning.
    """
    if not text:
        return None
    cleaned = re.sub(r"[$,\s]", "", text)
    if not re.fullmatch(r"\d+(?:\.\d+)?", cleaned):
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def find_price(text: str) -> Decimal | None:
    """First list-price-looking token in a block of card text ("$2K" cuts are skipped)."""
    m = PRICE_RE.search(text or "")
    if not m:
        return None
    return parse_price(m.group(0))


def parse_specs(text: str | None) -> dict[str, Any]:
    """
    "3 bd | 2.5 ba | 1,800 sqft" -> {"beds": 3, "baths": 2.5, "sqft": 1800}

    Each field is matched on its own; whatever is missing is simply absent.
    """
    out: dict[str, Any] = {}
    if not text:
        return out

    m = BEDS_RE.search(text)
    if m:
        out["beds"] = to_int(m.group(1))

    m = BATHS_RE.search(text)
    if m:
        out["baths"] = to_float(m.group(1))

    m = SQFT_RE.search(text)
    if m:
        out["sqft"] = to_int(m.group(1))

    return {k: v for k, v in out.items() if v is not None}


def parse_lot_size(text: str | None) -> float | None:
    """Acreage, e.g. "12.5 acres" -> 12.5."""
    if not text:
        return None
    m = ACRES_RE.search(text)
    return to_float(m.group(1)) if m else None


def parse_price_change(text: str | None, today: date | None = None) -> PriceChange | None:
    """
    "Price cut: $2K (11/5)" -> PriceChange(amount=2000, date=<year>-11-05)

    Emails only carry month/day, so the year is the current calendar year.
    A December cut read in early January lands a year in the future; that is
    kept as-is rather than guessed around.
    """
    if not text:
        return None
    m = PRICE_CHANGE_RE.search(text)
    if not m:
        return None

    today = today or date.today()
    amount = Decimal(m.group(1)) * 1000
    try:
        when = date(today.year, int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None
    return PriceChange(amount=amount, date=when)


def extract_listing_id(url: str, source: ListingSource) -> str:
    """
    Zillow:  .../homedetails/123-Main-St/12345678_zpid/  -> "12345678"
    Redfin:  .../SC/Florence/1002-Pitty-Pat-Dr-29501/home/12345678 -> "12345678"
    Realtor: .../realestateandhomes-detail/..._M12345-67890 -> "12345-67890"
    Land:    .../property/some-slug/1234567 -> "1234567"

    Anything else falls back to the URL itself.
    """
    pattern = LISTING_ID_PATTERNS.get(source)
    if pattern is None:
        return url
    m = pattern.search(url)
    return m.group(1) if m else url


def _match_source(haystack: str) -> ListingSource | None:
    if not haystack:
        return None
    for source, markers in SOURCE_MARKERS.items():
        if any(mk in haystack for mk in markers):
            return source
    return None


def determine_source(sender: str | None, url: str | None = None) -> ListingSource:
    return (
        _match_source((sender or "").lower())
        or _match_source((url or "").lower())
        or ListingSource.unknown
    )

# listingsync/adapters/parsers/registry.py
from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from ...domain.parsing import determine_source
from ...domain.types import ListingSource
from .base import ListingEmailParser, ParseResult
from .land import LandParser
from .realtor import RealtorParser
from .redfin import RedfinParser
from .zillow import ZillowParser

log = logging.getLogger(__name__)

PARSERS: dict[ListingSource, ListingEmailParser] = {
    ListingSource.zillow: ZillowParser(),
    ListingSource.redfin: RedfinParser(),
    ListingSource.realtor: RealtorParser(),
    ListingSource.land: LandParser(),
}

_unregistered = set(ListingSource) - {ListingSource.unknown} - set(PARSERS)
if _unregistered:
    raise RuntimeError(f"No email parser registered for: {sorted(s.value for s in _unregistered)}")


def get_parser(source: ListingSource) -> ListingEmailParser | None:
    return PARSERS.get(source)


def parse_listing_email(html: str, sender: str) -> ParseResult:
    """
    One alert email -> candidates + errors. Never raises.

    An unrecognized sender yields no candidates and exactly one error.
    """
    result = ParseResult()

    source = determine_source(sender)
    parser = get_parser(source)
    if parser is None:
        result.errors.append(f"Unknown email source: {sender}")
        return result

    try:
        soup = BeautifulSoup(html or "", "lxml")
        result.candidates.extend(parser.extract(soup, source))
    except Exception as e:
        result.errors.append(f"Error parsing email from {sender}: {e}")

    log.debug("parsed %d %s listings from %s", len(result.candidates), source.value, sender)
    return result

# listingsync/adapters/parsers/base.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator

from bs4 import BeautifulSoup, Tag

from ...domain.address import AddressFormatError, normalize_address, parse_address
from ...domain.normalize import normalize_property_type
from ...domain.parsing import (
    extract_listing_id,
    find_price,
    parse_price_change,
    parse_specs,
    to_int,
)
from ...domain.types import CandidateListing, ListingSource

log = logging.getLogger(__name__)

# Links that live in every alert email but never point at a listing card
SKIP_LINK_PATTERNS: tuple[str, ...] = (
    "unsubscribe",
    "settings",
    "preferences",
    "privacy",
    "pixel",
    "mailto:",
    "/help",
    "terms",
)

PLACEHOLDER_IMAGE_MARKERS: tuple[str, ...] = (
    "pixel",
    "spacer",
    "blank",
    "transparent",
    "1x1",
    "tracking",
    "beacon",
    "open.gif",
)

# "123 Main St, Anytown, CA 90210" (segments may also be split by newlines)
STREET_ADDRESS_RE = re.compile(
    r"\d+[^\S\n]+[^,\n]+?\s*[,\n]\s*[^,\n]+?\s*[,\n]\s*[A-Z]{2}\b(?:[^\S\n]+\d{5})?"
)
# "123 Main St, Anytown CA 90210"
STREET_CITY_STATE_RE = re.compile(
    r"\d+[^\S\n]+[^,\n]+?\s*,\s*[^,\n]+?[^\S\n]+[A-Z]{2}\b(?:[^\S\n]+\d{5})?"
)
# land parcels often have no street number: "County Road 12, Dahlonega, GA"
OPEN_ADDRESS_RE = re.compile(
    r"(?m)^[^\S\n]*[^,\n$]+?\s*[,\n]\s*[^,\n]+?\s*[,\n]\s*[A-Z]{2}\b(?:[^\S\n]+\d{5})?"
)

SPEC_PREFIX_RE = re.compile(
    r"^(?:\s*[\d.,]+\s*(?:bedrooms?|beds?|bds?|bathrooms?|baths?|ba|sqft|sq\.?\s*ft\.?)(?![a-z])[\s|·•,]*)+",
    re.I,
)
LEADING_NOISE_RE = re.compile(r"^(?:[\d.,]+\s+)+(?=\d+\s+\S)")

PRICE_CUT_RE = re.compile(
    r"Price\s+(?:cut|drop|reduced)\s*:?\s*\$\d+(?:\.\d+)?\s*K\s*\(\d{1,2}/\d{1,2}\)", re.I
)
BUILDER_RE = re.compile(r"Builder:\s*([^\n$|]+)")
AGENT_RE = re.compile(r"(?:\bListing (?:provided )?by|\bListed by|\bBy:)\s*:?\s*([^\n$|]+)", re.I)
# status badge: a line that is only the status word ("Pending", "SOLD", "Off market.")
STATUS_RE = re.compile(r"^[^\S\n]*(pending|sold|off[- ]market)[^\S\n]*[.!]?[^\S\n]*$", re.I | re.M)
PROPERTY_TYPE_RE = re.compile(
    r"\b(house|condo|townhouse|townhome|multi[- ]family|lot/land|land)\s+for\s+sale\b", re.I
)
YEAR_BUILT_RE = re.compile(r"\bBuilt(?:\s+in)?:?\s*((?:18|19|20)\d{2})\b", re.I)


def card_text(node: Tag) -> str:
    return node.get_text("\n", strip=True)


@dataclass(frozen=True)
class SourceProfile:
    """
    Declarative knobs for one listing source. Parsers read these instead of
    branching on the source name.
    """

    source: ListingSource
    # href must contain one of these...
    link_markers: tuple[str, ...]
    # ...and one of these, when any are given
    path_markers: tuple[str, ...] = ()
    skip_patterns: tuple[str, ...] = SKIP_LINK_PATTERNS

    # links are click-tracking redirects: the URL itself is the only id
    tracking_links: bool = False
    street_number_required: bool = True

    price_cut: bool = False
    builder: bool = False
    agent: bool = False
    new_construction: bool = False

    container_tags: tuple[str, ...] = ("table", "div", "td")
    max_card_depth: int = 8


@dataclass
class ParseResult:
    candidates: list[CandidateListing] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class ListingEmailParser:
    """
    Shared card-extraction skeleton:
      anchors -> de-dupe by href -> enclosing card -> price + address gate
      -> details -> CandidateListing

    Subclasses set `profile` and override the hooks they need.
    """

    profile: SourceProfile

    def __init__(self, profile: SourceProfile | None = None) -> None:
        if profile is not None:
            self.profile = profile

    # -------------------------
    # Contract
    # -------------------------

    def extract(self, soup: BeautifulSoup, source: ListingSource) -> list[CandidateListing]:
        out: list[CandidateListing] = []
        # call-scoped: one listing is often linked from image, title and button
        seen: set[str] = set()

        for anchor, href in self._listing_anchors(soup):
            if href in seen:
                continue
            seen.add(href)

            try:
                candidate = self._extract_one(anchor, href, source)
            except AddressFormatError as e:
                log.debug("skip %s anchor (address): %s", source.value, e)
                continue
            except Exception:
                log.warning("skip %s anchor %s", source.value, href[:120], exc_info=True)
                continue

            if candidate is not None:
                out.append(candidate)

        return out

    # -------------------------
    # Anchor selection
    # -------------------------

    def is_listing_link(self, href: str) -> bool:
        h = href.lower()
        p = self.profile
        if not any(m in h for m in p.link_markers):
            return False
        if p.path_markers and not any(m in h for m in p.path_markers):
            return False
        return not any(s in h for s in p.skip_patterns)

    def _listing_anchors(self, soup: BeautifulSoup) -> Iterator[tuple[Tag, str]]:
        for a in soup.find_all("a", href=True):
            href = str(a["href"]).strip()
            if href and self.is_listing_link(href):
                yield a, href

    # -------------------------
    # Card location
    # -------------------------

    def _find_card(self, anchor: Tag) -> tuple[Tag, str, str] | None:
        """
        Nearest container around the anchor that holds a price and exactly one
        address. Climbing stops once a container spans several cards.

        A card often repeats its own address (link text plus a detail line,
        with or without zip), so matches are compared by normalized key and
        the longest spelling of each is kept.
        """
        depth = 0
        for node in anchor.parents:
            if not isinstance(node, Tag) or node.name not in self.profile.container_tags:
                continue
            depth += 1
            if depth > self.profile.max_card_depth:
                break

            text = card_text(node)
            by_key: dict[str, str] = {}
            for raw in self.address_matches(text):
                key = self.address_key(raw)
                if key is None:
                    continue
                if key not in by_key or len(raw) > len(by_key[key]):
                    by_key[key] = raw

            if len(by_key) > 1:
                break
            if by_key and find_price(text) is not None:
                return node, text, next(iter(by_key.values()))

        return None

    # -------------------------
    # Address handling
    # -------------------------

    @property
    def address_patterns(self) -> tuple[re.Pattern[str], ...]:
        if self.profile.street_number_required:
            return (STREET_ADDRESS_RE, STREET_CITY_STATE_RE)
        return (OPEN_ADDRESS_RE,)

    def repair_text(self, text: str) -> str | None:
        """Hook: second-chance rewrite of card text when no address matched."""
        return None

    def address_matches(self, text: str) -> list[str]:
        for pattern in self.address_patterns:
            found = [m.group(0) for m in pattern.finditer(text)]
            if found:
                return found

        repaired = self.repair_text(text)
        if repaired and repaired != text:
            for pattern in self.address_patterns:
                found = [m.group(0) for m in pattern.finditer(repaired)]
                if found:
                    return found
        return []

    @staticmethod
    def clean_address(raw: str) -> str:
        """
        Flattened cards glue neighbours onto the street:
          "1,800 sqft123 Main St, Anytown, CA" -> "123 Main St, Anytown, CA"
          "2 123 Main St, Anytown, CA"         -> "123 Main St, Anytown, CA"
        """
        s = re.sub(r"\s*\n\s*", ", ", raw.strip())
        s = SPEC_PREFIX_RE.sub("", s)
        s = LEADING_NOISE_RE.sub("", s)
        return s.strip(" ,|")

    def address_key(self, raw: str) -> str | None:
        """Comparison key for an address match; None when it does not parse."""
        try:
            a = parse_address(self.clean_address(raw))
        except AddressFormatError:
            return None
        return normalize_address(a.street, a.city, a.state)

    # -------------------------
    # Candidate assembly
    # -------------------------

    def source_id_for(self, href: str, source: ListingSource) -> str:
        if self.profile.tracking_links:
            return href
        return extract_listing_id(href, source)

    def _extract_one(self, anchor: Tag, href: str, source: ListingSource) -> CandidateListing | None:
        card = self._find_card(anchor)
        if card is None:
            return None
        node, text, raw_address = card

        price = find_price(text)
        if price is None:
            return None
        address = parse_address(self.clean_address(raw_address))

        candidate = CandidateListing(
            street=address.street,
            city=address.city,
            state=address.state,
            zip=address.zip,
            source=source,
            source_id=self.source_id_for(href, source),
            url=href,
            price=price,
            images=self.first_image(node),
        )
        self.fill_details(candidate, text)
        return candidate

    def fill_details(self, candidate: CandidateListing, text: str) -> None:
        specs = parse_specs(text)
        candidate.beds = specs.get("beds")
        candidate.baths = specs.get("baths")
        candidate.sqft = specs.get("sqft")

        m = PROPERTY_TYPE_RE.search(text)
        if m:
            candidate.property_type = normalize_property_type(m.group(1))

        m = YEAR_BUILT_RE.search(text)
        if m:
            candidate.year_built = to_int(m.group(1))

        candidate.status = self.status_text(text)

        p = self.profile
        if p.price_cut:
            m = PRICE_CUT_RE.search(text)
            if m:
                candidate.price_change = parse_price_change(m.group(0))
        if p.builder:
            m = BUILDER_RE.search(text)
            if m:
                candidate.builder = m.group(1).strip() or None
        if p.agent:
            m = AGENT_RE.search(text)
            if m:
                candidate.agent = m.group(1).strip() or None

    def status_text(self, text: str) -> str | None:
        m = STATUS_RE.search(text)
        if m:
            return m.group(1)
        if self.profile.new_construction and "new construction" in text.lower():
            return "New construction"
        return None

    @staticmethod
    def first_image(node: Tag) -> list[str]:
        for img in node.find_all("img", src=True):
            src = str(img["src"]).strip()
            if not src or src.startswith("data:"):
                continue
            if any(mk in src.lower() for mk in PLACEHOLDER_IMAGE_MARKERS):
                continue
            if str(img.get("width", "")) == "1" or str(img.get("height", "")) == "1":
                continue
            return [src]
        return []

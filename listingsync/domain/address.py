# listingsync/domain/address.py
from __future__ import annotations

import re

from .types import ParsedAddress

ZIP_RE = re.compile(r"^\d{5}$")

STREET_ABBREVIATIONS: dict[str, str] = {
    "street": "st",
    "avenue": "ave",
    "road": "rd",
    "drive": "dr",
    "court": "ct",
    "circle": "cir",
    "boulevard": "blvd",
    "lane": "ln",
    "place": "pl",
    "terrace": "ter",
    "parkway": "pkwy",
    "highway": "hwy",
    "trail": "trl",
    "square": "sq",
}

_ABBREV_RE = re.compile(r"\b(" + "|".join(STREET_ABBREVIATIONS) + r")\b")
_DIRECTIONAL_RE = re.compile(r"\b(?:north|south|east|west|n|s|e|w)\b\.?")
_UNIT_RE = re.compile(r"(?:\b(?:unit|apt)\b|#)\.?\s*[\w-]*")


class AddressFormatError(ValueError):
    pass


def parse_address(raw: str) -> ParsedAddress:
    """
    Split a one-line address into parts. Handles:
      "1002 Pitty Pat Dr, Florence, SC"          -> street, city, state
      "8007 Broadmead Ct, Spartanburg, SC 29307" -> street, city, state, zip
      "181 E Lanford St, Spartanburg SC 29307"   -> street, city, state, zip
    """
    # &nbsp; arrives as \xa0; stored parts must compare equal to typed ones
    parts = [re.sub(r"\s+", " ", p).strip() for p in (raw or "").strip().split(",")]
    if len(parts) < 2:
        raise AddressFormatError(f"Invalid address format: {raw!r}")

    street = parts[0]

    if len(parts) == 2:
        # "City State" or "City State Zip"
        tokens = parts[1].split()
        zipcode = tokens.pop() if tokens and ZIP_RE.match(tokens[-1]) else None
        state = tokens.pop() if tokens else ""
        city = " ".join(tokens)
        return ParsedAddress(street=street, city=city, state=state, zip=zipcode)

    city = parts[1]
    tokens = parts[2].split()
    zipcode = None
    if len(tokens) > 1 and ZIP_RE.match(tokens[-1]):
        zipcode = tokens.pop()
    return ParsedAddress(street=street, city=city, state=" ".join(tokens), zip=zipcode)


def normalize_street(street: str) -> str:
    s = (street or "").lower().strip()
    s = _ABBREV_RE.sub(lambda m: STREET_ABBREVIATIONS[m.group(1)], s)
    s = _DIRECTIONAL_RE.sub("", s)
    s = _UNIT_RE.sub("", s)
    s = re.sub(r"[.,]", "", s)
    return re.sub(r"\s+", " ", s).strip()


def normalize_address(street: str, city: str, state: str) -> str:
    """
    Comparison key for fuzzy identity: "street|city|state".

    normalize_address("123 North Main Street", "Anytown", "CA")
      == normalize_address("123 Main St", "Anytown", "CA")
      == "123 main st|anytown|ca"
    """
    return "|".join(
        (
            normalize_street(street),
            re.sub(r"\s+", " ", (city or "").lower().strip()),
            (state or "").lower().strip(),
        )
    )

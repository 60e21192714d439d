# listingsync/adapters/parsers/redfin.py
from __future__ import annotations

import re

from ...domain.types import ListingSource
from .base import ListingEmailParser, SourceProfile

# "123 Main StAnytown, SC 29307": street type glued to the city
GLUED_CITY_RE = re.compile(
    r"\b(St|Ave|Rd|Dr|Ct|Cir|Blvd|Ln|Way|Pl|Ter|Pkwy|Hwy|Trl|Sq)\.?[^\S\n]?(?=[A-Z][a-z])"
)


class RedfinParser(ListingEmailParser):
    profile = SourceProfile(
        source=ListingSource.redfin,
        link_markers=("redfin.com",),
        path_markers=("/home/",),
        price_cut=True,
        builder=True,
        new_construction=True,
    )

    def repair_text(self, text: str) -> str | None:
        return GLUED_CITY_RE.sub(r"\1, ", text)

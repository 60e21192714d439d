# listingsync/adapters/parsers/land.py
from __future__ import annotations

from ...domain.parsing import parse_lot_size
from ...domain.types import CandidateListing, ListingSource, PropertyType
from .base import ListingEmailParser, SourceProfile


class LandParser(ListingEmailParser):
    profile = SourceProfile(
        source=ListingSource.land,
        link_markers=("land.com", "landwatch.com"),
        street_number_required=False,
    )

    def fill_details(self, candidate: CandidateListing, text: str) -> None:
        # acreage instead of beds/baths/sqft
        candidate.property_type = PropertyType.land
        candidate.lot_size = parse_lot_size(text)
        candidate.status = self.status_text(text)

# listingsync/adapters/parsers/realtor.py
from __future__ import annotations

from ...domain.types import ListingSource
from .base import ListingEmailParser, SourceProfile


class RealtorParser(ListingEmailParser):
    """
    Realtor.com alerts only expose click-tracking redirects (move.com /
    click.e.realtor.com). The redirect URL is unique per email, not per
    listing, so reconciliation leans on the address fallback.
    """

    profile = SourceProfile(
        source=ListingSource.realtor,
        link_markers=("realtor.com", "move.com"),
        tracking_links=True,
        builder=True,
    )

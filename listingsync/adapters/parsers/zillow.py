# listingsync/adapters/parsers/zillow.py
from __future__ import annotations

from ...domain.types import ListingSource
from .base import ListingEmailParser, SourceProfile


class ZillowParser(ListingEmailParser):
    """
    Zillow alerts link each card to /homedetails/<slug>/<zpid>_zpid/, so the
    zpid is a stable source id. Cards carry an optional listing agent line.
    """

    profile = SourceProfile(
        source=ListingSource.zillow,
        link_markers=("zillow.com",),
        path_markers=("homedetails",),
        agent=True,
    )

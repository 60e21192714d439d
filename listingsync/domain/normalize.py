# listingsync/domain/normalize.py
from __future__ import annotations

import re

from .types import PropertyStatus, PropertyType


def classify_status(raw: object) -> PropertyStatus:
    """
    Free-text status from an email card -> status enum.
    Anything unrecognized ("New construction", "Just listed") is active.
    """
    if raw is None:
        return PropertyStatus.active

    s = str(raw).strip().lower()
    if "pending" in s:
        return PropertyStatus.pending
    if "sold" in s:
        return PropertyStatus.sold
    if "off" in s:
        return PropertyStatus.off_market
    return PropertyStatus.active


def normalize_property_type(raw: object) -> PropertyType | None:
    """
    Map messy card labels into PropertyType. None when the text says nothing
    useful, so callers can keep whatever they already had.
    """
    if raw is None:
        return None
    if isinstance(raw, PropertyType):
        return raw

    s = str(raw).strip().lower()
    s = re.sub(r"[\s_/|-]+", " ", s)

    if any(k in s for k in ["condo", "condominium"]):
        return PropertyType.condo
    if any(k in s for k in ["townhouse", "town home", "townhome", "rowhouse", "row house"]):
        return PropertyType.townhouse
    if any(k in s for k in ["multi family", "multifamily", "duplex", "triplex", "fourplex"]):
        return PropertyType.multi_family
    if any(k in s for k in ["land", "lot", "acreage", "vacant"]):
        return PropertyType.land
    if any(k in s for k in ["single family", "house", "home"]):
        return PropertyType.home

    return None

from datetime import date
from decimal import Decimal

from listingsync.domain.normalize import classify_status, normalize_property_type
from listingsync.domain.parsing import (
    determine_source,
    extract_listing_id,
    find_price,
    parse_lot_size,
    parse_price,
    parse_price_change,
    parse_specs,
)
from listingsync.domain.types import ListingSource, PriceChange, PropertyStatus, PropertyType


def test_parse_price():
    assert parse_price("$1,234,567") == Decimal("1234567")
    assert parse_price("$ 450,000") == Decimal("450000")
    assert parse_price("$99.50") == Decimal("99.50")
    assert parse_price("Contact agent") is None
    assert parse_price("") is None
    assert parse_price(None) is None


def test_find_price_skips_price_cut_amounts():
    assert find_price("Price cut: $2K (11/5)\n$289,900") == Decimal("289900")
    assert find_price("3 bds | 2 ba") is None


def test_parse_specs_full_and_partial():
    assert parse_specs("3 bd | 2.5 ba | 1,800 sqft") == {"beds": 3, "baths": 2.5, "sqft": 1800}
    assert parse_specs("4 beds · 2 baths") == {"beds": 4, "baths": 2.0}
    assert parse_specs("2,100 sq ft") == {"sqft": 2100}
    assert parse_specs("nothing useful here") == {}
    assert parse_specs(None) == {}


def test_parse_lot_size():
    assert parse_lot_size("12.5 Acres") == 12.5
    assert parse_lot_size("1 acre lot") == 1.0
    assert parse_lot_size("3 bds") is None


def test_parse_price_change_uses_current_year():
    today = date(2024, 11, 20)
    assert parse_price_change("Price cut: $2K (11/5)", today=today) == PriceChange(
        amount=Decimal("2000"), date=date(2024, 11, 5)
    )
    assert parse_price_change("$1.5K (3/14)", today=today) == PriceChange(
        amount=Decimal("1500"), date=date(2024, 3, 14)
    )


def test_parse_price_change_rejects_garbage():
    assert parse_price_change("Price cut: $2,000") is None
    assert parse_price_change("$2K (13/45)", today=date(2024, 1, 1)) is None
    assert parse_price_change(None) is None


def test_extract_listing_id_per_source():
    assert (
        extract_listing_id(
            "https://www.zillow.com/homedetails/123-Main-St-Anytown-CA-90210/12345678_zpid/",
            ListingSource.zillow,
        )
        == "12345678"
    )
    assert (
        extract_listing_id(
            "https://www.redfin.com/SC/Florence/1002-Pitty-Pat-Dr-29501/home/11223344",
            ListingSource.redfin,
        )
        == "11223344"
    )
    assert (
        extract_listing_id(
            "https://www.realtor.com/realestateandhomes-detail/789-Pine-Rd_Greenville_SC_29601_M12345-67890",
            ListingSource.realtor,
        )
        == "12345-67890"
    )
    assert (
        extract_listing_id("https://www.land.com/property/12-acres-in-lumpkin/1234567/", ListingSource.land)
        == "1234567"
    )


def test_extract_listing_id_falls_back_to_url():
    url = "https://www.zillow.com/b/some-building/"
    assert extract_listing_id(url, ListingSource.zillow) == url
    assert extract_listing_id(url, ListingSource.unknown) == url


def test_determine_source_prefers_sender_then_url():
    assert determine_source("instant-updates@mail.zillow.com") == ListingSource.zillow
    assert determine_source("listings@redfin.com") == ListingSource.redfin
    assert determine_source("alerts@e.realtor.com") == ListingSource.realtor
    assert determine_source("noreply@move.com") == ListingSource.realtor
    assert determine_source("alerts@land.com") == ListingSource.land
    assert determine_source("digest@landwatch.com") == ListingSource.land

    assert determine_source("me@example.com", "https://www.redfin.com/home/1") == ListingSource.redfin
    assert determine_source("listings@redfin.com", "https://www.zillow.com/x") == ListingSource.redfin
    assert determine_source("me@example.com") == ListingSource.unknown
    assert determine_source(None) == ListingSource.unknown


def test_classify_status():
    assert classify_status("Pending") == PropertyStatus.pending
    assert classify_status("SOLD") == PropertyStatus.sold
    assert classify_status("off-market") == PropertyStatus.off_market
    assert classify_status("New construction") == PropertyStatus.active
    assert classify_status(None) == PropertyStatus.active


def test_normalize_property_type():
    assert normalize_property_type("House") == PropertyType.home
    assert normalize_property_type("Single Family") == PropertyType.home
    assert normalize_property_type("Condo") == PropertyType.condo
    assert normalize_property_type("Townhome") == PropertyType.townhouse
    assert normalize_property_type("Multi-family") == PropertyType.multi_family
    assert normalize_property_type("Lot/Land") == PropertyType.land
    assert normalize_property_type(PropertyType.condo) == PropertyType.condo
    assert normalize_property_type("mystery") is None
    assert normalize_property_type(None) is None

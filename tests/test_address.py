import pytest

from listingsync.adapters.parsers.base import ListingEmailParser
from listingsync.domain.address import AddressFormatError, normalize_address, parse_address
from listingsync.domain.types import ParsedAddress


def test_parse_address_three_segments():
    assert parse_address("1002 Pitty Pat Dr, Florence, SC") == ParsedAddress(
        street="1002 Pitty Pat Dr", city="Florence", state="SC"
    )
    assert parse_address("8007 Broadmead Ct, Spartanburg, SC 29307") == ParsedAddress(
        street="8007 Broadmead Ct", city="Spartanburg", state="SC", zip="29307"
    )


def test_parse_address_two_segments():
    assert parse_address("181 E Lanford St, Spartanburg SC 29307") == ParsedAddress(
        street="181 E Lanford St", city="Spartanburg", state="SC", zip="29307"
    )
    assert parse_address("12 Bay Rd, Myrtle Beach SC") == ParsedAddress(
        street="12 Bay Rd", city="Myrtle Beach", state="SC"
    )


def test_parse_address_rejects_single_segment():
    with pytest.raises(AddressFormatError):
        parse_address("123 Main St")
    with pytest.raises(AddressFormatError):
        parse_address("")


def test_normalize_address_equates_spelling_variants():
    key = "123 main st|anytown|ca"
    assert normalize_address("123 Main St", "Anytown", "CA") == key
    assert normalize_address("123 Main Street", "anytown", "ca") == key
    assert normalize_address("123 North Main Street", "Anytown", "CA") == key
    assert normalize_address("123 Main St.", " Anytown ", "CA") == key
    assert normalize_address("123 Main St Unit 4B", "Anytown", "CA") == key
    assert normalize_address("123 Main St #4", "Anytown", "CA") == key


def test_normalize_address_keeps_different_houses_apart():
    assert normalize_address("123 Main St", "Anytown", "CA") != normalize_address("125 Main St", "Anytown", "CA")
    assert normalize_address("123 Main St", "Anytown", "CA") != normalize_address("123 Main St", "Anytown", "NV")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("123 Main St, Anytown, CA 90210", "123 Main St, Anytown, CA 90210"),
        ("789 Pine Rd\nGreenville, SC 29601", "789 Pine Rd, Greenville, SC 29601"),
        ("1,800 sqft 123 Main St, Anytown, CA", "123 Main St, Anytown, CA"),
        ("3 bds | 2 ba | 123 Main St, Anytown, CA", "123 Main St, Anytown, CA"),
        ("2 123 Main St, Anytown, CA", "123 Main St, Anytown, CA"),
    ],
)
def test_clean_address_strips_glued_prefixes(raw, expected):
    assert ListingEmailParser.clean_address(raw) == expected


def test_parse_address_collapses_nbsp_and_runs_of_spaces():
    assert parse_address("123  Main\xa0St, Salt\xa0Lake City, UT") == ParsedAddress(
        street="123 Main St", city="Salt Lake City", state="UT"
    )

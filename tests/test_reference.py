"""Tests for airline / airport reference data and log masking."""

import pytest

from farewatch.airlines import (
    AIRLINES, BRAND_OPTIONS, airlines_in_scope, brand_category, get_airline, is_basic_economy,
)
from farewatch.airports import clean_iata, get_airport_display, is_plausible_text_code
from farewatch.redact import mask, mask_name


def test_get_airline() -> None:
    assert get_airline("dl").name == "Delta Air Lines"
    assert get_airline(" ua ").ticket_prefix == "016"
    assert get_airline("ZZ") is None
    assert get_airline(None) is None


def test_airlines_in_scope() -> None:
    assert airlines_in_scope(None) == list(AIRLINES.values())
    assert [p.code for p in airlines_in_scope("B6")] == ["B6"]
    assert airlines_in_scope("ZZ") == []


def test_delta_beacon_table() -> None:
    delta = get_airline("DL")
    assert delta.beacon_pattern.search("https://smetrics.delta.com/b/ss/deltacom2/1/s1?v4=LGA")
    assert delta.beacon_keys["pnr"] == "v91"
    assert get_airline("AA").beacon_pattern is None


@pytest.mark.parametrize("brand,expected", [
    ("Basic Economy", "Basic Economy"),
    ("Main Cabin", "Main/Economy"),
    ("Premium Economy", "Premium Economy"),
    ("First Class", "First/Business"),
    ("Comfort+", None),
    (None, None),
])
def test_brand_category(brand, expected) -> None:
    assert brand_category(brand) == expected
    assert expected is None or expected in BRAND_OPTIONS


def test_is_basic_economy() -> None:
    assert is_basic_economy("Basic Economy")
    assert not is_basic_economy("Main Cabin")
    assert not is_basic_economy(None)


def test_clean_iata_does_not_coerce() -> None:
    assert clean_iata("LGA") == "LGA"
    assert clean_iata("lga") is None
    assert clean_iata(" LGA") is None
    assert clean_iata(None) is None


def test_plausible_text_code() -> None:
    assert is_plausible_text_code("TQO")
    assert not is_plausible_text_code("THE")
    assert not is_plausible_text_code("MAR")


def test_airport_display() -> None:
    assert get_airport_display("TQO") == "Tulum (TQO)"
    assert get_airport_display("XNA") == "XNA"
    assert get_airport_display(None) == ""


def test_mask() -> None:
    assert mask("GO7RLB") == "GO****"
    assert mask("0062345678901", keep=3) == "006**********"
    assert mask("A") == "*"
    assert mask(None) is None
    assert mask_name("John", "Smith") == "J. S."
    assert mask_name(None, "Smith") == "S."
    assert mask_name(None, None) is None

import json

import pytest

from fieldbuddy import io


@pytest.mark.parametrize("text,expected", [
    ("12", 12.0), (" 12.5 ", 12.5), ("0,35", 0.35), ("1 200", 1200.0), ("-3", -3.0), (7, 7.0),
])
def test_parse_number(text, expected):
    assert io.parse_number(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "1.2.3", "nan", "inf", float("nan")])
def test_parse_number_rejects(text):
    with pytest.raises(ValueError, match="Invalid numeric value"):
        io.parse_number(text)


def test_parse_optional_number():
    assert io.parse_optional_number("") is None
    assert io.parse_optional_number("   ") is None
    assert io.parse_optional_number(None) is None
    assert io.parse_optional_number("118") == 118.0


def test_parse_enumerants():
    assert io.parse_refrigerant("r-22") == "R22"
    assert io.parse_metering_device(" TXV ") == "txv"
    assert io.parse_metering_device("piston") == "fixed"
    assert io.parse_metering_device(None) == "txv"


@pytest.mark.parametrize("text,expected", [
    ("3", 3),
    ("0.4, 0.35, 0.25", [0.4, 0.35, 0.25]),
    ("40/35/25", [40.0, 35.0, 25.0]),
    ("0,5;0,5", [0.5, 0.5]),
])
def test_parse_split(text, expected):
    assert io.parse_split(text) == expected


@pytest.mark.parametrize("text", ["", "0", "a,b"])
def test_parse_split_rejects(text):
    with pytest.raises(ValueError):
        io.parse_split(text)


def test_parse_segment():
    assert io.parse_segment("elbow-90-smooth:4") == {"length_ft": 4.0, "type": "elbow-90-smooth"}
    assert io.parse_segment("25") == {"length_ft": 25.0, "type": None}


def test_load_catalog_from_file(tmp_path):
    p = tmp_path / "cat.json"
    p.write_text(json.dumps({"version": "x", "categories": [{"name": "A", "items": [{"name": "i", "price": 2}]}]}),
                 encoding="utf-8")
    cat = io.load_catalog(p)
    assert cat.version == "x"
    assert cat.categories[0].items[0].price == 2.0

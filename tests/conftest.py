"""Shared fixtures for the country quiz tests."""
import random

import pytest

from countryquiz.models import Country


def make_record(name, capital=("Capital",), region="Europe", population=1_000_000, svg=True):
    """Builds a country record shaped like the REST endpoint payload."""
    record = {
        "name": {"common": name, "official": f"Republic of {name}"},
        "flags": {"png": f"https://flags.example/{name}.png"},
        "region": region,
        "population": population,
    }
    if svg:
        record["flags"]["svg"] = f"https://flags.example/{name}.svg"
    if capital is not None:
        record["capital"] = list(capital)
    return record


def make_country(name, capital="Capital", region="Europe", population=1_000_000):
    return Country(
        name=name,
        capital=[capital],
        region=region,
        population=population,
        flag_svg=f"https://flags.example/{name}.svg",
    )


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def raw_records():
    """Twelve eligible records across four regions plus ineligible noise."""
    regions = ["Europe", "Asia", "Africa", "Americas"]
    records = [
        make_record(f"Country {i}", capital=(f"City {i}",), region=regions[i % 4])
        for i in range(12)
    ]
    records += [
        make_record("No Capital", capital=None),
        make_record("Empty Capital", capital=()),
        {"name": {"common": "No Flag"}, "capital": ["Nowhere"], "region": "Asia"},
        {"flags": {"svg": "x.svg"}, "capital": ["Nameless"], "region": "Asia"},
        "not a record",
    ]
    return records


@pytest.fixture
def abcd_countries():
    """A (capital X, region R1, 2 million people) and three from other regions."""
    return [
        make_country("A", capital="X", region="R1", population=2_000_000),
        make_country("B", capital="Y", region="R2"),
        make_country("C", capital="Z", region="R3"),
        make_country("D", capital="W", region="R4"),
    ]


@pytest.fixture
def country_pool():
    regions = ["Europe", "Asia", "Africa", "Americas", "Oceania"]
    return [
        make_country(f"Land {i}", capital=f"Town {i}", region=regions[i % 5])
        for i in range(20)
    ]

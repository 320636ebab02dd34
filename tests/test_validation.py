import pytest

from descentchart.models import Chart, Family, Person
from descentchart.parsing import parse_chart
from descentchart.validation import extract_years, validate_chart


@pytest.mark.parametrize(
    "details,expected",
    [
        (["A. Brown", "1819-1901"], (1819, 1901)),
        (["A. Brown", "(1819-)"], (1819, None)),
        (["A. Brown", "b. 24 May 1819, London", "d. 22 Jan 1901"], (1819, 1901)),
        (["Henry Johnson", "b: Abt. 1806 in Kilford, Ireland. d: 17 Sep 1861 in Swindon"], (1806, 1861)),
        (
            ["Bennett, Edward", "b. 1843-11-01 - St. David's, Carmarthenshire, Wales, d. before 1871"],
            (1843, 1871),
        ),
        (["Martha Martin", "b: abt 1860 in Trowbridge. d: Deceased."], (1860, None)),
        (["A. Brown", "carpenter"], (None, None)),
    ],
)
def test_extract_years(details, expected):
    assert extract_years(Person(id=1, details=details)) == expected


def test_valid_chart_has_no_warnings(brown_family_text):
    assert validate_chart(parse_chart(brown_family_text)) == []


def test_missing_root():
    assert validate_chart(Chart()) == ["Chart has no root person"]


def test_child_born_before_parent():
    warnings = validate_chart(parse_chart("1. A (1850-1900)\n  2. B (1840-1900)"))
    assert warnings == ["Impossible: B born before parent A"]


def test_young_parent_is_suspicious():
    warnings = validate_chart(parse_chart("1. A (1840-1900)\n  2. B (1845-1900)"))
    assert warnings == ["Suspicious: A was less than 12 years old when B was born"]


def test_partner_is_checked_as_parent():
    warnings = validate_chart(parse_chart("1. A (1820-1900)\n+ C (1860-1920)\n  2. B (1850-1900)"))
    assert warnings == ["Impossible: B born before parent C"]


def test_death_before_birth():
    warnings = validate_chart(parse_chart("1. A (1900-1850)"))
    assert warnings == ["Impossible: A died before being born"]


def test_root_id_and_duplicates():
    chart = Chart(
        root=Person(
            id=2,
            details=["A"],
            families=[Family(children=[Person(id=3, details=["B"]), Person(id=3, details=["C"])])],
        )
    )
    warnings = validate_chart(chart)
    assert "Root person has id 2, expected 1" in warnings
    assert "Duplicate id 3 used by 2 people" in warnings


def test_ids_out_of_order():
    chart = Chart(root=Person(id=1, details=["A"], families=[Family(children=[Person(id=3), Person(id=2)])]))
    assert validate_chart(chart) == ["Ids are not increasing in chart order"]


def test_shared_person():
    shared = Person(id=4, details=["D"])
    chart = Chart(
        root=Person(
            id=1,
            details=["A"],
            families=[
                Family(
                    children=[
                        Person(id=2, details=["B"], families=[Family(children=[shared])]),
                        Person(id=3, details=["C"], families=[Family(children=[shared])]),
                    ]
                )
            ],
        )
    )
    warnings = validate_chart(chart)
    assert "People listed in more than one place: [4]" in warnings


def test_cycle():
    root = Person(id=1, details=["A"])
    child = Person(id=2, details=["B"], families=[Family(children=[root])])
    root.families.append(Family(children=[child]))
    warnings = validate_chart(Chart(root=root))
    assert "Cycle detected in descent: [1, 2]" in warnings


def test_ancestry_dates_are_consistent(ancestry_text):
    assert validate_chart(parse_chart(ancestry_text)) == []

# tests/test_versions.py
import pytest

from eks_scanner.versions import compare_versions


@pytest.mark.parametrize("a,b,expected", [
    ("1.27", "1.27", 0),
    ("1.27", "1.26", 1),
    ("1.26", "1.27", -1),
    ("1.9", "1.10", -1),
    ("1.27", "1.27.0", 0),
    ("1.27.1", "1.27", 1),
    ("2", "1.99", 1),
])
def test_compare_versions(a, b, expected):
    assert compare_versions(a, b) == expected


def test_non_numeric_component_counts_as_zero():
    assert compare_versions("1.x", "1.0") == 0
    assert compare_versions("1.x", "1.1") == -1
    assert compare_versions("1..2", "1.0.2") == 0


@pytest.mark.parametrize("part", ["2_7", "+27", " 27", "27 ", "٢٧", "-1"])
def test_only_plain_ascii_digits_are_numeric(part):
    assert compare_versions(f"1.{part}", "1.0") == 0
    assert compare_versions(f"1.{part}", "1.3") == -1


def test_underscore_component_is_not_twenty_seven():
    assert compare_versions("1.2_7", "1.3") == -1


def test_comparison_stops_at_first_difference():
    assert compare_versions("2.0.0", "1.99.99") == 1

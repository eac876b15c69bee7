"""
Dotted numeric version comparison.

Components are compared as integers, left to right, so "1.9" < "1.10".
Missing trailing components count as 0 ("1.27" == "1.27.0").
A non-numeric component also counts as 0; this is not semantic versioning.
"""

from itertools import zip_longest


def _component(part: str) -> int:
    # plain ASCII digits only; "2_7", "+27", " 27" and non-ASCII digits are non-numeric
    if part.isascii() and part.isdigit():
        return int(part)
    return 0


def compare_versions(version1: str, version2: str) -> int:
    """
    Return -1, 0 or 1 as version1 is lower than, equal to or higher than version2.
    """
    v1parts = version1.split(".")
    v2parts = version2.split(".")
    for a, b in zip_longest(v1parts, v2parts, fillvalue="0"):
        v1part = _component(a)
        v2part = _component(b)
        if v1part > v2part:
            return 1
        if v1part < v2part:
            return -1
    return 0

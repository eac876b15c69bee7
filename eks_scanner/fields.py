# eks_scanner/fields.py
"""
Typed reads of configuration fields.

Counts and lists are read strictly; a value of the wrong shape raises SnapshotError
instead of being coerced (a bare string is not a one-element list).
"""

from typing import Any, Mapping, Optional, Sequence

from eks_scanner.exceptions import SnapshotError


def read_int(section: Mapping[str, Any], key: str, path: str) -> Optional[int]:
    """
    Return section[key] as an int, or None when it is absent.

    Raises SnapshotError for booleans, strings, floats and other non-integer values.
    """
    value = section.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise SnapshotError(f"{path}.{key} must be an integer, got {value!r}")
    return value


def read_list(section: Mapping[str, Any], key: str, path: str) -> Sequence[Any]:
    """
    Return section[key] as a list/tuple, or an empty tuple when it is absent.
    """
    value = section.get(key)
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise SnapshotError(f"{path}.{key} must be a list, got {value!r}")
    return value

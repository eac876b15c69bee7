"""
Scanner exceptions.

All exceptions inherit from ScannerError so callers can catch them in one place.
The concrete errors also subclass ValueError, since they describe bad input data.
"""


class ScannerError(Exception):
    """Base exception for all scanner errors."""


class PolicyConfigError(ScannerError, ValueError):
    """Raised when a policy document does not match the expected parameter schema."""


class SnapshotError(ScannerError, ValueError):
    """Raised when a configuration item cannot be turned into a resource snapshot.

    This can indicate:
    - configuration or tags that are not JSON objects
    - a configuration string that is not valid JSON
    - a size or count field that is not an integer
    """

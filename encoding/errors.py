"""
errors.py
Exceptions raised by the encoding core.
"""

from typing import Optional, Tuple


class EncodingError(Exception):
    """Base class for encoder/decoder failures."""


class PolicySizeMismatchError(EncodingError, ValueError):
    """
    Raised when a policy vector does not match the move table.

    A mismatch means the network was trained against a different move
    table, so no partial decoding is attempted.
    """

    def __init__(self, actual: int, expected: int, shape: Optional[Tuple[int, ...]] = None):
        self.actual = actual
        self.expected = expected
        self.shape = shape
        if shape is not None:
            message = f"Policy output has shape {shape}, expected a single vector of {expected}"
        else:
            message = f"Policy vector has {actual} entries, move table has {expected}"
        super().__init__(message)

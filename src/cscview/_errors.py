"""
Error handling for cscview.

Every error raised by the view carries a numeric code, and each concrete
error also derives from the matching builtin so ``except IndexError``
style handlers keep working.
"""

from __future__ import annotations

import operator
from typing import Optional


# =============================================================================
# Error Codes
# =============================================================================

CSCVIEW_OK = 0

# Argument errors (10-19)
CSCVIEW_ERROR_INVALID_ARGUMENT = 10
CSCVIEW_ERROR_DIMENSION_MISMATCH = 11
CSCVIEW_ERROR_INDEX_OUT_OF_BOUNDS = 14
CSCVIEW_ERROR_NOT_SQUARE = 15


_ERROR_MESSAGES = {
    CSCVIEW_OK: "Success",
    CSCVIEW_ERROR_INVALID_ARGUMENT: "Invalid argument",
    CSCVIEW_ERROR_DIMENSION_MISMATCH: "Dimension mismatch",
    CSCVIEW_ERROR_INDEX_OUT_OF_BOUNDS: "Index out of bounds",
    CSCVIEW_ERROR_NOT_SQUARE: "Matrix is not square",
}


# =============================================================================
# Exception Classes
# =============================================================================

class CSCViewError(Exception):
    """
    Base exception for all cscview errors.

    Attributes:
        code: Numeric error code (one of the CSCVIEW_ERROR_* constants)
        message: Human readable message
    """

    OK = CSCVIEW_OK
    ERROR_INVALID_ARGUMENT = CSCVIEW_ERROR_INVALID_ARGUMENT
    ERROR_DIMENSION_MISMATCH = CSCVIEW_ERROR_DIMENSION_MISMATCH
    ERROR_INDEX_OUT_OF_BOUNDS = CSCVIEW_ERROR_INDEX_OUT_OF_BOUNDS
    ERROR_NOT_SQUARE = CSCVIEW_ERROR_NOT_SQUARE

    default_code = CSCVIEW_ERROR_INVALID_ARGUMENT

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None):
        if code is None:
            code = self.default_code
        self.code = code
        if message is None:
            message = _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")
        self.message = message
        super().__init__(f"cscview error {code}: {message}")

    @classmethod
    def from_code(cls, code: int, context: str = "") -> "CSCViewError":
        """Create exception from error code with optional context."""
        base_msg = _ERROR_MESSAGES.get(code, "Unknown error")
        msg = f"{context}: {base_msg}" if context else base_msg
        return cls(msg, code)


class InvalidShape(CSCViewError, ValueError):
    """Backing arrays disagree with the declared shape."""

    default_code = CSCVIEW_ERROR_DIMENSION_MISMATCH


class IndexOutOfBounds(CSCViewError, IndexError):
    """Row or column index outside ``[0, n)``."""

    default_code = CSCVIEW_ERROR_INDEX_OUT_OF_BOUNDS


class NotSquare(CSCViewError, ValueError):
    """Operation needs ``rows == cols``."""

    default_code = CSCVIEW_ERROR_NOT_SQUARE


# =============================================================================
# Checking Helpers
# =============================================================================

def check_index(idx, size: int, axis: str = "index") -> int:
    """
    Validate a single row/column index.

    Negative indices are rejected rather than wrapped.

    Args:
        idx: Index to check (anything supporting ``__index__``)
        size: Length of the axis
        axis: Axis name used in the error message

    Returns:
        The index as a plain int

    Raises:
        IndexOutOfBounds: If ``idx`` is outside ``[0, size)``
        TypeError: If ``idx`` is not an integer
    """
    i = operator.index(idx)
    if i < 0 or i >= size:
        raise IndexOutOfBounds(f"{axis} {i} out of bounds [0, {size})")
    return i

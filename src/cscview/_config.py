"""
Global configuration for cscview.

Provides:
- Strict mode (full CSC validation on every attach)
- Default index precision for arrays the package allocates itself
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Union

import numpy as np


# =============================================================================
# Precision Types
# =============================================================================

class IndexType(Enum):
    """Index (integer) precision."""
    INT32 = "i32"
    INT64 = "i64"

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype(np.int32) if self == IndexType.INT32 else np.dtype(np.int64)


def _strict_from_env() -> bool:
    """Strict mode default, taken from CSCVIEW_STRICT."""
    return os.environ.get('CSCVIEW_STRICT', '').lower() in ('1', 'true', 'yes')


# =============================================================================
# Global Configuration State
# =============================================================================

class _Config:
    """
    Global configuration singleton.

    Attributes:
        strict: Run the full well-formedness check on attach
        default_index: Index dtype for freshly allocated index arrays
    """

    def __init__(self):
        self._strict = _strict_from_env()
        # The host format stores indices as 32-bit integers
        self._default_index = IndexType.INT32

    @property
    def strict(self) -> bool:
        return self._strict

    @strict.setter
    def strict(self, value: bool):
        self._strict = bool(value)

    @property
    def default_index(self) -> IndexType:
        """Get default index type."""
        return self._default_index

    @default_index.setter
    def default_index(self, value: Union[IndexType, str]):
        """Set default index type ('i32', 'i64', 'int32', 'int64')."""
        if isinstance(value, str):
            value = IndexType(value) if value in ('i32', 'i64') else \
                    IndexType.INT32 if '32' in value else \
                    IndexType.INT64
        self._default_index = value

    @property
    def index_dtype(self) -> np.dtype:
        return self._default_index.numpy_dtype

    def reset(self) -> None:
        """Restore defaults (environment is re-read)."""
        self.__init__()

    def __repr__(self) -> str:
        return f"Config(strict={self._strict}, default_index={self._default_index.value})"


_config = _Config()


# =============================================================================
# Public API
# =============================================================================

def get_config() -> _Config:
    """Get global configuration instance."""
    return _config


def set_strict(flag: bool = True) -> None:
    """
    Enable or disable strict mode.

    In strict mode every attach runs ``SparseMatrixView.validate()``,
    which is O(nnz).

    Example:
        >>> cscview.set_strict(True)
        >>> view = cscview.attach(host)  # raises InvalidShape on a malformed host
    """
    _config.strict = flag


def set_index_type(value: Union[IndexType, str]) -> None:
    """Set the index dtype used by from_dense() and copy()."""
    _config.default_index = value

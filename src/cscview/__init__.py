"""
cscview - zero-copy views over compressed sparse column matrices

Lets Python code read and edit a CSC sparse matrix owned by someone
else (a dgCMatrix-style host object or a scipy.sparse CSC matrix)
without duplicating its row-index, column-pointer and value arrays.

Architecture:
    ┌──────────────────────────────────────────────┐
    │  Host: DgCMatrix | scipy CSC | slot mapping  │
    ├──────────────────────────────────────────────┤
    │  SparseMatrixView (borrows i, p, x)          │
    │    at / column / row / ColumnIterator        │
    │    column_sums / row_sums / crossprod        │
    └──────────────────────────────────────────────┘

Example:
    >>> import cscview
    >>> host = cscview.DgCMatrix(i=[0, 2, 1], p=[0, 1, 2, 3],
    ...                          x=[5.0, 7.0, 9.0], Dim=(3, 3))
    >>> view = cscview.attach(host)
    >>> view.row_sums()
    array([5., 9., 7.])
    >>> view.detach().x is host.x
    True
"""

__version__ = '0.1.0'

from ._errors import (
    CSCViewError,
    InvalidShape,
    IndexOutOfBounds,
    NotSquare,
)
from ._config import (
    IndexType,
    get_config,
    set_strict,
    set_index_type,
)
from ._backend import Ownership, CSCStorage
from ._ownership import OwnershipTracker, ensure_alive
from ._host import DgCMatrix, is_host_like
from ._iterator import ColumnIterator
from ._view import SparseMatrixView, attach
from ._ops import (
    sum_cols,
    sum_rows,
    mean_cols,
    mean_rows,
    crossprod,
)

__all__ = [
    '__version__',

    # Core
    'SparseMatrixView',
    'ColumnIterator',
    'attach',

    # Host
    'DgCMatrix',
    'is_host_like',

    # Storage / ownership
    'Ownership',
    'CSCStorage',
    'OwnershipTracker',
    'ensure_alive',

    # Reductions
    'sum_cols',
    'sum_rows',
    'mean_cols',
    'mean_rows',
    'crossprod',

    # Errors
    'CSCViewError',
    'InvalidShape',
    'IndexOutOfBounds',
    'NotSquare',

    # Config
    'IndexType',
    'get_config',
    'set_strict',
    'set_index_type',
]

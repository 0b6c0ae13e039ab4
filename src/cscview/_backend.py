"""Storage Abstraction.

Holds the four CSC arrays a view reads through, together with the
ownership model describing who is responsible for them.

Memory Model:
    - BORROWED: arrays are the host object's own ndarrays. The view
      reads and writes them in place and never frees them.
    - OWNED: arrays were allocated by cscview (from_dense, copy).
"""

from enum import Enum
from typing import Any, Optional, Sequence, Tuple
from dataclasses import dataclass

import numpy as np

__all__ = [
    'Ownership',
    'CSCStorage',
]


class Ownership(Enum):
    """Data ownership model.

    Attributes:
        OWNED: The view allocated its arrays.
               Created by: from_dense(), copy()

        BORROWED: The view aliases arrays owned by a host object.
                  The host must keep the data alive.
                  Created by: attach(), from_host()
    """
    OWNED = 'owned'
    BORROWED = 'borrowed'


@dataclass
class CSCStorage:
    """Backing arrays of a CSC matrix.

    Attributes:
        indices: Row index of every stored entry.
        indptr: Column pointers, length ncol + 1.
        data: Stored values, same length as indices.
        shape: (nrow, ncol).
        dimnames: (row labels, column labels); either may be None.
        ownership: Whether the arrays are owned or borrowed.
    """
    indices: np.ndarray
    indptr: np.ndarray
    data: np.ndarray
    shape: Tuple[int, int]
    dimnames: Optional[Tuple[Optional[Sequence[Any]], Optional[Sequence[Any]]]] = None
    ownership: Ownership = Ownership.BORROWED

    @property
    def nnz(self) -> int:
        return len(self.data)

    @property
    def is_owned(self) -> bool:
        return self.ownership == Ownership.OWNED

    @property
    def is_borrowed(self) -> bool:
        return self.ownership == Ownership.BORROWED

    @property
    def nbytes(self) -> int:
        """Bytes held by the three numeric arrays."""
        return self.indices.nbytes + self.indptr.nbytes + self.data.nbytes

    def copy(self, index_dtype=None) -> 'CSCStorage':
        """Deep copy of the numeric arrays; labels are shallow-copied."""
        if index_dtype is None:
            index_dtype = self.indices.dtype
        return CSCStorage(
            indices=np.array(self.indices, dtype=index_dtype),
            indptr=np.array(self.indptr, dtype=index_dtype),
            data=np.array(self.data, dtype=np.float64),
            shape=tuple(self.shape),
            dimnames=copy_dimnames(self.dimnames),
            ownership=Ownership.OWNED,
        )


def _copy_labels(labels):
    # Tuples are immutable and shared as-is; other containers keep their type
    if labels is None or isinstance(labels, tuple):
        return labels
    if hasattr(labels, 'copy'):
        return labels.copy()
    return type(labels)(labels)


def copy_dimnames(dimnames):
    """Shallow copy of a (row labels, column labels) pair.

    Each label container keeps its type (tuple, list, ndarray), so a
    detached host compares equal to the one it came from.
    """
    if dimnames is None:
        return None
    rownames, colnames = dimnames
    return (_copy_labels(rownames), _copy_labels(colnames))

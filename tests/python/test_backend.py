"""
Tests for the storage backend.
"""

import numpy as np

from cscview import CSCStorage, Ownership


def _storage(**kwargs):
    return CSCStorage(
        indices=np.array([0, 1], dtype=np.int32),
        indptr=np.array([0, 1, 2], dtype=np.int32),
        data=np.array([1.0, 2.0]),
        shape=(2, 2),
        **kwargs,
    )


class TestCSCStorage:

    def test_defaults(self):
        storage = _storage()
        assert storage.ownership == Ownership.BORROWED
        assert storage.is_borrowed
        assert not storage.is_owned
        assert storage.nnz == 2
        assert storage.dimnames is None

    def test_nbytes(self):
        storage = _storage()
        assert storage.nbytes == 2 * 4 + 3 * 4 + 2 * 8

    def test_copy_owns_new_arrays(self):
        storage = _storage(dimnames=(['a', 'b'], None))
        dup = storage.copy()
        assert dup.is_owned
        assert not np.shares_memory(dup.data, storage.data)
        assert not np.shares_memory(dup.indices, storage.indices)
        assert dup.indices.dtype == np.int32
        assert dup.dimnames == (['a', 'b'], None)
        assert dup.dimnames[0] is not storage.dimnames[0]

    def test_copy_widens_indices(self):
        dup = _storage().copy(index_dtype=np.int64)
        assert dup.indices.dtype == np.int64
        assert dup.indptr.dtype == np.int64
        np.testing.assert_array_equal(dup.indptr, [0, 1, 2])

"""Ownership Tracking.

A view borrows the host's arrays. Holding the ndarrays keeps the
buffers themselves alive (reference counting), but the host object the
view was attached to can still go away. OwnershipTracker keeps a weak
reference to that host so callers can ask whether it still exists.

Safety Model:
    1. OWNED data: No external dependencies, always safe
    2. BORROWED data: The arrays stay valid; the host object may not
"""

from typing import Any, Optional
from weakref import ref

__all__ = [
    'OwnershipTracker',
    'ensure_alive',
]


class OwnershipTracker:
    """Tracks ownership and validity of borrowed data.

    Attributes:
        _weak_ref: Weak reference to the borrowed host.
        _strong_ref: Strong reference, for hosts that can't be weakref'd.
        _is_owned: Whether we own the data.

    Example:
        >>> tracker = OwnershipTracker.borrowed(host)
        >>> tracker.is_valid
        True
    """

    __slots__ = ('_is_owned', '_weak_ref', '_strong_ref')

    def __init__(self, source: Optional[Any] = None, owned: bool = True):
        self._is_owned = owned
        self._weak_ref: Optional[ref] = None
        self._strong_ref: Optional[Any] = None

        if source is not None and not owned:
            try:
                self._weak_ref = ref(source)
            except TypeError:
                # dicts and other plain containers can't be weakref'd
                self._strong_ref = source

    @classmethod
    def owned(cls) -> 'OwnershipTracker':
        """Create tracker for owned data."""
        return cls(source=None, owned=True)

    @classmethod
    def borrowed(cls, source: Any) -> 'OwnershipTracker':
        """Create tracker for data borrowed from ``source``."""
        return cls(source=source, owned=False)

    @property
    def is_owned(self) -> bool:
        return self._is_owned

    @property
    def is_borrowed(self) -> bool:
        return not self._is_owned

    @property
    def is_valid(self) -> bool:
        """
        True if owned, or if the borrowed host is still alive.
        """
        if self._is_owned or self._strong_ref is not None:
            return True
        if self._weak_ref is not None:
            return self._weak_ref() is not None
        return True

    @property
    def source(self) -> Optional[Any]:
        """Get host object (if any).

        Raises:
            RuntimeError: If the borrowed host was garbage collected.
        """
        if self._is_owned:
            return None
        if self._strong_ref is not None:
            return self._strong_ref
        if self._weak_ref is not None:
            src = self._weak_ref()
            if src is None:
                raise RuntimeError(
                    "Borrowed host was garbage collected! "
                    "Ensure the host outlives this view."
                )
            return src
        return None

    def ensure_valid(self) -> None:
        if not self.is_valid:
            raise RuntimeError(
                "Borrowed host was garbage collected! "
                "This view no longer has a host to hand back to."
            )

    def __repr__(self) -> str:
        if self._is_owned:
            return "OwnershipTracker(owned)"
        if self._weak_ref is None and self._strong_ref is None:
            return "OwnershipTracker(borrowed, detached)"
        alive = "alive" if self.is_valid else "dead"
        return f"OwnershipTracker(borrowed, {alive})"


def ensure_alive(obj: Any) -> None:
    """Ensure a view's host object is still alive.

    Raises:
        RuntimeError: If the host was garbage collected.
    """
    tracker = getattr(obj, '_ownership', None)
    if tracker is not None:
        tracker.ensure_valid()

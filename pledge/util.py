# -*- coding: utf-8 -*-

from collections.abc import Sequence
from threading import Lock


class SettleGuard(object):
    """Single-use flag shared by a pair of resolve/reject callbacks.

    A foreign thenable may call the callbacks we gave it several times, or
    call both. Only the first call must be taken into account.
    """

    def __init__(self):
        self._lock = Lock()
        self._called = False

    def trip(self):
        """Mark the guard as used.

        Returns:
            boolean: True if this is the first call; False if the guard has
                already been tripped.
        """
        with self._lock:
            if self._called:
                return False
            self._called = True
            return True


def is_ordered_collection(value):
    """Check if a value is a finite, ordered collection of items.

    Strings are sequences of characters, but are not accepted as collections
    of promises.

    Returns:
        boolean: True if value is a non-string Sequence (list, tuple, ...).
    """
    return (isinstance(value, Sequence) and
            not isinstance(value, (str, bytes, bytearray)))

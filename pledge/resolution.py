# -*- coding: utf-8 -*-
"""Resolution of a Promise with a value who may be another promise.

When a Promise is resolved with a value `x`, the promise doesn't always take
this value: if `x` is a "thenable" (an object with a callable `then`
attribute, like a Promise), the promise follows `x` and will take its final
state instead. As `x` can itself be resolved with another thenable, the
operation is recursive.

Thenables from other libraries are accepted. They are not trusted: a `then`
attribute raising an error, or callbacks called many times are handled
without settling the promise twice.
"""

from .errors import ChainingCycleError
from .util import SettleGuard

# Values who can never be thenables. Subclasses may define `then`.
_PLAIN_TYPES = (type(None), bool, int, float, complex, str, bytes)


def settle_with(promise, x, fulfill, reject):
    """Settle `promise` according to the value `x`.

    Args:
        promise (Promise): promise being resolved. Only used to detect cycles.
        x: value used to resolve the promise.
        fulfill (callable): settles the promise with a final value.
        reject (callable): settles the promise with a rejection reason.
    """
    if x is promise:
        reject(ChainingCycleError())
        return

    guard = SettleGuard()

    if type(x) in _PLAIN_TYPES:
        fulfill(x)
        return

    try:
        then = x.then
    except AttributeError:
        fulfill(x)
        return
    except Exception as error:
        if guard.trip():
            reject(error)
        return

    if not callable(then):
        fulfill(x)
        return

    def resolve_promise(y):
        if guard.trip():
            settle_with(promise, y, fulfill, reject)

    def reject_promise(reason):
        if guard.trip():
            reject(reason)

    try:
        then(resolve_promise, reject_promise)
    except Exception as error:
        if guard.trip():
            reject(error)

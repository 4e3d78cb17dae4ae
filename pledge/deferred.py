# -*- coding: utf-8 -*-

from .promise import Promise


class Deferred(object):
    """

    A Deferred is the "creator" side of an async task, whereas a Promise
    represents the asynchronous value from the "consumer" side.

    Attributes:
        promise (Promise): the Promise associated to the Deferred.
        resolve (function)
        reject (function)
    """

    def __init__(self, *args, **kwargs):
        self.promise = Promise(self._executor, *args, **kwargs)

    def _executor(self, resolve, reject):
        self.resolve = resolve
        self.reject = reject


def deferred():
    """Create a pending Promise, with its resolve and reject functions.

    This is the entry point expected by the Promises/A+ conformance
    test suites.

    Returns:
        Deferred: object with `promise`, `resolve` and `reject` attributes.
    """
    return Deferred(_name='DEFERRED')

# -*- coding: utf-8 -*-
"""Exceptions used as rejection reasons, or raised by the waiting helpers."""


class PromiseError(Exception):
    """Base class of all errors produced by the promise module."""
    pass


class ChainingCycleError(PromiseError, TypeError):
    """A Promise has been resolved with itself.

    Following such a promise would wait forever, so the promise is rejected
    with this error instead.
    """

    def __init__(self, message='Chaining cycle detected for promise'):
        PromiseError.__init__(self, message)


class AggregateError(PromiseError):
    """Several rejections collected into a single reason.

    Used by ``Promise.any()`` when none of the promises has been fulfilled.

    Attributes:
        errors (list): reasons of every rejected promise, in the order of the
            promise list.
    """

    def __init__(self, errors, message='All promises were rejected'):
        PromiseError.__init__(self, message)
        self.errors = list(errors)

    def __repr__(self):
        return 'AggregateError(%r)' % (self.errors,)


class Rejection(PromiseError):
    """Raised by ``Promise.result()`` when the reason is not an exception.

    Any value can be used to reject a Promise, but only exceptions can be
    raised. Other values are wrapped in a Rejection.

    Attributes:
        reason: the original rejection reason.
    """

    def __init__(self, reason):
        PromiseError.__init__(self, 'Promise rejected with %r' % (reason,))
        self.reason = reason


class TimeoutError(PromiseError):
    """An operation could not be executed within the time allowed."""
    pass


class WaitError(PromiseError, RuntimeError):
    """Waiting for a Promise from this thread would block forever.

    Raised by ``Promise.result()`` and ``Promise.exception()`` when called
    from the thread who runs the callbacks, while this thread can't run them
    itself.
    """

    def __init__(self, message='Cannot wait for a promise from the thread '
                               'running the promise callbacks'):
        PromiseError.__init__(self, message)

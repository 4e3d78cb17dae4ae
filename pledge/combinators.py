# -*- coding: utf-8 -*-
"""Class methods to manipulate a group of promises.

They only use the public interface of the Promise: the constructor,
``resolve()`` and ``then()``. Each item of the list is converted to a Promise
by ``resolve()``, so any value or thenable can be given.

The list must be an ordered collection (list, tuple, ...). If it isn't, the
resulting promise is rejected with a ``TypeError``.
"""

from functools import partial
from threading import Lock

from .errors import AggregateError
from .util import is_ordered_collection


def _check_collection(promises):
    if not is_ordered_collection(promises):
        raise TypeError('%s object is not an ordered collection of promises'
                        % type(promises).__name__)
    return list(promises)


class Combinators(object):
    """Mixin adding the group methods to a Promise class."""

    @classmethod
    def all(cls, promises):
        """Create a Promise who wait a list of promises to be all fulfilled.

        The resulting Promise resolve when all of the promises in the list are
        resolved, and returns a list of all the resulting values, keeping the
        order of the promise list.
        If a promise is rejected, then the resulting promise is rejected with
        the same reason, and all results from other promises are ignored.

        Args:
            promises (list of Promise)
        Returns:
            Promise<list>: resulting promise, fulfilled when all promises are
                fulfilled, or rejected when one of the promises is rejected.
        """
        def executor(resolve, reject):
            items = _check_collection(promises)
            if not items:
                return resolve([])

            lock = Lock()
            remaining_tasks = [len(items)]
            results = [None] * len(items)

            def resolve_one_promise(index, value):
                with lock:
                    results[index] = value
                    remaining_tasks[0] -= 1
                    is_done = remaining_tasks[0] == 0
                if is_done:
                    resolve(results)

            for index, p in enumerate(items):
                cls.resolve(p).then(partial(resolve_one_promise, index),
                                    reject)

        return cls(executor, _name='ALL')

    @classmethod
    def all_settled(cls, promises):
        """Create a Promise who wait a list of promises to be all settled.

        The resulting Promise is never rejected. It's fulfilled with a list
        describing the outcome of each promise, in the order of the list:
        ``{'status': 'fulfilled', 'value': value}`` or
        ``{'status': 'rejected', 'reason': reason}``.

        Args:
            promises (list of Promise)
        Returns:
            Promise<list of dict>: fulfilled when all promises are settled.
        """
        def executor(resolve, reject):
            items = _check_collection(promises)
            if not items:
                return resolve([])

            lock = Lock()
            remaining_tasks = [len(items)]
            results = [None] * len(items)

            def settle_one_promise(index, outcome):
                with lock:
                    results[index] = outcome
                    remaining_tasks[0] -= 1
                    is_done = remaining_tasks[0] == 0
                if is_done:
                    resolve(results)

            def on_fulfilled(index, value):
                settle_one_promise(index, {'status': cls.FULFILLED,
                                           'value': value})

            def on_rejected(index, reason):
                settle_one_promise(index, {'status': cls.REJECTED,
                                           'reason': reason})

            for index, p in enumerate(items):
                cls.resolve(p).then(partial(on_fulfilled, index),
                                    partial(on_rejected, index))

        return cls(executor, _name='ALL_SETTLED')

    @classmethod
    def any(cls, promises):
        """Create a Promise fulfilled by the first promise fulfilled.

        The results of the other promises are ignored.
        If all promises are rejected, the resulting Promise is rejected with an
        ``AggregateError``, containing all the reasons in the order of the
        list. An empty list is thus immediately rejected.

        Args:
            promises (list of Promise)
        Returns:
            Promise: a promise
        """
        def executor(resolve, reject):
            items = _check_collection(promises)
            if not items:
                return reject(AggregateError([]))

            lock = Lock()
            remaining_tasks = [len(items)]
            errors = [None] * len(items)

            def reject_one_promise(index, reason):
                with lock:
                    errors[index] = reason
                    remaining_tasks[0] -= 1
                    is_done = remaining_tasks[0] == 0
                if is_done:
                    reject(AggregateError(errors))

            for index, p in enumerate(items):
                cls.resolve(p).then(resolve,
                                    partial(reject_one_promise, index))

        return cls(executor, _name='ANY')

    @classmethod
    def race(cls, promises):
        """Run all promises, then resolve or reject with the fastest Promise.

        The resulting Promise will be settled as soon as the one the running
        Promises is done. Result value or rejection reason of the finished
        promise are transmitted.
        All other Promise result's will be ignored.

        Note that with an empty list, the resulting Promise stays pending
        forever.

        Args:
            promises (list): list of promises to run at the same time.
        Returns:
            Promise: a promise
        """
        def executor(resolve, reject):
            for p in _check_collection(promises):
                cls.resolve(p).then(resolve, reject)

        return cls(executor, _name='RACE')

# -*- coding: utf-8 -*-

import logging
from functools import partial
from threading import Condition

from . import scheduler
from .combinators import Combinators
from .errors import Rejection, TimeoutError
from .resolution import settle_with

_logger = logging.getLogger(__name__)


class _Reaction(object):
    """Callback registered by ``Promise.then()``, feeding a derived Promise.

    The handler receives the result of the original promise. Its return
    value resolves the derived promise; an exception rejects it.
    Without handler, the result is transmitted as is with `passthrough`.
    """

    __slots__ = ('handler', 'passthrough', 'resolve', 'reject')

    def __init__(self, handler, passthrough, resolve, reject):
        self.handler = handler
        self.passthrough = passthrough
        self.resolve = resolve
        self.reject = reject

    def __call__(self, result):
        if self.handler is None:
            return self.passthrough(result)
        try:
            new_result = self.handler(result)
        except Exception as error:
            return self.reject(error)
        self.resolve(new_result)


class Promise(Combinators):
    """It represents an operation expected to be completed in the future.

    A Promise is used for asynchronous computation. It contains a value not yet
    known when the Promise is created. It allows to set callbacks who will be
    called as soon as the result is known. It's a "promise" of a future value.

    A Promise is settled only once: it's either fulfilled with a value, or
    rejected with a reason. Callbacks are always executed by the scheduler
    (see the ``scheduler`` module), never during the call to ``then()``.

    All calls to the methods are thread-safe.
    """

    PENDING = 'pending'
    FULFILLED = 'fulfilled'
    REJECTED = 'rejected'

    def __init__(self, executor, _name=None, _previous=None):
        """Constructor of the Promise.

        Generate the two callbacks for the executor, then call the `executor`.
        It means the executor will be fully executed before the the constructor
        returns.
        If the executor raises an exception, it's caught and the Promise is
        rejected with this exception.

        Only the first call to one of the two callbacks is taken into account.
        The next calls are ignored.

        Args:
            executor (callable): Takes 2 callable arguments:
                The first one, `resolve()` should be called when the task is
                done and must accept the result's value as its only argument.
                If this value is a thenable, the Promise will follow it.
                The second, `reject()`, should be called when an error
                occurs. Its argument is the reason of the rejection, usually
                an instance of `Exception`.
            _name (str): if set, name used when converted to text.
            _previous (Promise): if set, promise chained to this one. Only
                used when converted to text.
        """

        self._state = self.PENDING
        self._result = None
        self._is_resolved = False
        self._condition = Condition()
        self._name = _name or getattr(executor, '__name__', '???')
        self._previous = _previous

        self._callbacks = []
        self._errbacks = []

        def resolve(value):
            if self._lock_in('resolve', value):
                settle_with(self, value, self._fulfill_now, self._reject_now)

        def reject(reason):
            if self._lock_in('reject', reason):
                self._reject_now(reason)

        try:
            executor(resolve, reject)
        except Exception as error:
            reject(error)

    @property
    def state(self):
        """str: one of PENDING, FULFILLED or REJECTED."""
        with self._condition:
            return self._state

    def result(self, timeout=None):
        """Wait for the result and returns it as soon as it's available.

        Args:
            timeout (int, optional): if set, maximum time to wait the promise
                to be fulfilled. By default, it can wait indefinitely.
        Returns:
            *: value encapsulated, defined by the operation.
        Raises:
            TimeoutError: if the promise is not settled within the delay.
            WaitError: if the current thread is the one who must run the
                callbacks, and the scheduler can't run them during the wait.
            Rejection: if the promise is rejected with a value who is not an
                exception.
            *: If the promise is rejected, the rejection cause is raised.
        """
        self._wait(timeout)

        with self._condition:
            if self._state == self.REJECTED:
                if isinstance(self._result, BaseException):
                    raise self._result
                raise Rejection(self._result)
            return self._result

    def exception(self, timeout=None):
        """Wait for the promise rejection and returns it's error.

        Args:
            timeout (int, optional): if set, maximum time to wait the promise
                to be rejected. By default, it can wait indefinitely.
        Returns:
            *: the reason of the rejection of the Promise.
            None: if the promise is fulfilled.
        Raises:
            TimeoutError: if the promise is not settled within the delay.
            WaitError: if the wait would block the callbacks.
        """
        self._wait(timeout)

        with self._condition:
            if self._state == self.REJECTED:
                return self._result
            return None

    def then(self, on_fulfilled=None, on_rejected=None):
        """Create a new promise from callbacks called when this one is settled.

        If the promise is fulfilled, the `on_fulfilled` callback will be
        called. Otherwise (the promise has been rejected), the `on_rejected`
        callback is called.
        The callbacks are never called before `then()` returns, even if the
        promise is already settled.
        In any case, the callback will define the state of the returned
        Promise. If the callback raises an exception, the new Promise is
        rejected. The callback can returns:
        - A value: the new promise will be fulfilled with this value.
        - Another Promise, or any object with a `then` method: when fulfilled
            or rejected, will transfer its status (state and result/error) to
            the Promise returned by this method.

        If a callback is not defined, the state of the self promise is
        transferred at the new promise (the state and the value/error).

        Args:
            on_fulfilled (callable, optional):  This callback will receive the
                result of the original promise as argument.
            on_rejected (callable, optional): This callback will receive the
                reason of the rejection of the original promise as argument.
        Returns:
            Promise<*>: new promise depending of self.
        """
        if not callable(on_fulfilled):
            on_fulfilled = None
        if not callable(on_rejected):
            on_rejected = None

        def chained_executor(resolve, reject):
            self._add_reactions(
                _Reaction(on_fulfilled, resolve, resolve, reject),
                _Reaction(on_rejected, reject, resolve, reject))

        if not on_rejected:
            name = '%s' % getattr(on_fulfilled, '__name__', '???')
        elif not on_fulfilled:
            name = '<None, %s>' % getattr(on_rejected, '__name__', '???')
        else:
            name = '<%s, %s>' % (getattr(on_fulfilled, '__name__', '???'),
                                 getattr(on_rejected, '__name__', '???'))
        return type(self)(chained_executor, _name=name, _previous=self)

    def catch(self, on_rejected):
        """Create a new promise with a callback called when an error occurs.

        Alias of `self.then(None, on_rejected)`

        Args:
            on_rejected (callable): Will be called with the reason if `self`
                is rejected.
        returns:
            Promise<*>: new Promise chained to `self`. If `self` is fulfilled,
                the promised value will be the same as `self`. Otherwise, the
                value returned by the `on_rejected()` callback.
        """
        return self.then(None, on_rejected)

    def finally_(self, on_settled):
        """Create a new promise with a callback called in any case.

        `on_settled()` takes no argument, and its return value is ignored:
        the new promise is settled like `self`. There are two exceptions: if
        `on_settled()` raises an error, or returns a thenable who is
        rejected, the new promise is rejected with that error.
        If `on_settled()` returns a thenable, the new promise waits for it.

        Args:
            on_settled (callable): called without argument when `self` is
                either fulfilled or rejected.
        Returns:
            Promise<*>: new Promise chained to `self`.
        """
        if not callable(on_settled):
            return self.then()

        cls = type(self)

        def finally_fulfilled(value):
            return cls.resolve(on_settled()).then(lambda _: value)

        def finally_rejected(reason):
            return cls.resolve(on_settled()).then(
                lambda _: cls.reject(reason))

        return self.then(finally_fulfilled, finally_rejected)

    def safeguard(self):
        """Catch all errors and log them with the most details possible.

        This method is aimed to protect the program from uncaught rejected
        Promise. If no error handler has been set (via then() or catch()), the
        default behavior is to do nothing, and thus, errors are silently
        ignored.
        Calling `safeguard()` after all chains are set will catch these errors,
        and log them as ERROR with the maximum of details possible.
        """
        def guard(reason):
            if isinstance(reason, BaseException):
                _logger.error('[SAFEGUARD] %s', self, exc_info=(
                    type(reason), reason, reason.__traceback__))
            else:
                _logger.error('[SAFEGUARD] %s rejected with %r', self, reason)

        self._add_reactions(_Reaction(None, _ignore, _ignore, _ignore),
                            _Reaction(guard, None, _ignore, _ignore))

    def __repr__(self):
        return 'Promise(%s)' % self._inner_print()

    def _inner_print(self):
        with self._condition:
            if self._state == self.REJECTED:
                state = 'R'
            elif self._state == self.FULFILLED:
                state = 'F'
            else:
                state = 'P'

        if self._previous:
            return '%s -> %s %s' % (self._previous._inner_print(), self._name,
                                    state)
        return '%s %s' % (self._name, state)

    @classmethod
    def resolve(cls, value):
        """Create a promise who resolves the selected value.

        Args:
            value: result of the promise. If it's a promise, it's returned as
                is. If it's a thenable, the new promise will follow it.
        Returns:
            Promise: new Promise resolved with the value passed in parameter.
        """
        if isinstance(value, cls):
            return value
        return cls(lambda ok, error: ok(value), _name='RESOLVE')

    @classmethod
    def reject(cls, reason):
        """Create a Promise rejected for the reason specified.

        Args:
            reason: Exception set to the Promise
        Returns:
            Promise: new Promise already rejected.
        """
        return cls(lambda ok, error: error(reason), _name='REJECT')

    def _wait(self, timeout):
        """Wait the promise to be settled, letting the scheduler run jobs.

        Must be called without the lock.
        """
        if not scheduler.get_scheduler().wait_for(
                self._is_settled, timeout, self._condition):
            raise TimeoutError()

    def _is_settled(self):
        return self._state != self.PENDING

    def _lock_in(self, action, value):
        """Mark the promise as resolved, if it's the first try.

        Returns:
            boolean: True if the caller can settle the promise.
        """
        with self._condition:
            is_first = not self._is_resolved
            self._is_resolved = True

        if not is_first:
            _logger.debug('Try to %s Promise %r already resolved. The value '
                          'will be ignored: %r', action, self, value)
        return is_first

    def _fulfill_now(self, value):
        self._settle(self.FULFILLED, value)

    def _reject_now(self, reason):
        self._settle(self.REJECTED, reason)

    def _settle(self, state, result):
        with self._condition:
            if self._state != self.PENDING:
                return
            self._state = state
            self._result = result

            if state == self.FULFILLED:
                reactions = self._callbacks
            else:
                reactions = self._errbacks

            # Free the references
            self._callbacks = None
            self._errbacks = None

            self._condition.notify_all()

            current_scheduler = scheduler.get_scheduler()
            for reaction in reactions:
                current_scheduler.schedule(partial(reaction, result))
            current_scheduler.wake_up()

    def _add_reactions(self, callback, errback):
        with self._condition:
            if self._state == self.PENDING:
                self._callbacks.append(callback)
                self._errbacks.append(errback)
            elif self._state == self.FULFILLED:
                scheduler.schedule(partial(callback, self._result))
            else:
                scheduler.schedule(partial(errback, self._result))


def _ignore(_value):
    pass

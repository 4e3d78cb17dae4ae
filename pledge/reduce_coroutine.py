# -*- coding: utf-8 -*-

from functools import wraps

from .deferred import Deferred
from .errors import Rejection
from .promise import Promise


def reduce_coroutine(safeguard=False):
    """Decorator who converts a coroutine of promises into a single promise.

    The greatest interest is the ability to write a function in an
    synchronous-like style, using many asynchronous Promises.
    Whatever is the number of Promises or async calls used, the result will
    always be an unique Promise wrapping the whole process.

    Each yielded value is converted with ``Promise.resolve()``. When this
    promise is fulfilled, its value is sent back to the generator; when it's
    rejected, the reason is raised inside the generator (wrapped into a
    ``Rejection`` if it's not an exception). The value returned by the
    generator is the result of the resulting Promise.

    Args:
        safeguard (boolean): if true, use `Promise.safeguard()` on the
            resulting promise.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            """
            Args:
                *args
                **kwargs
            Returns:
                Promise<*>
            """
            df = Deferred(_name='COROUTINE %s' % func.__name__)
            if safeguard:
                df.promise.safeguard()

            try:
                # Create generator; Initialization phase
                gen = func(*args, **kwargs)
            except Exception as error:
                df.reject(error)
                return df.promise

            def _wait_next(yielded_value):
                Promise.resolve(yielded_value).then(iter_next, iter_error)

            def iter_next(value):
                try:
                    next_value = gen.send(value)
                except StopIteration as stop:
                    return df.resolve(stop.value)
                except Exception as error:
                    return df.reject(error)
                _wait_next(next_value)

            def iter_error(reason):
                error = reason
                if not isinstance(reason, BaseException):
                    error = Rejection(reason)
                try:
                    next_value = gen.throw(error)
                except StopIteration as stop:
                    return df.resolve(stop.value)
                except Exception as raised_error:
                    # Uncaught by the generator: keep the original reason.
                    if raised_error is error:
                        return df.reject(reason)
                    return df.reject(raised_error)
                _wait_next(next_value)

            # Start and resolve loop.
            iter_next(None)

            return df.promise

        return wrapper
    return decorator

# -*- coding: utf-8 -*-

from .__version__ import __version__  # noqa

from .common import config, log
from .decorators import wrap_promise
from .deferred import Deferred, deferred
from .errors import (AggregateError, ChainingCycleError, PromiseError,
                     Rejection, TimeoutError, WaitError)
from .promise import Promise
from .reduce_coroutine import reduce_coroutine
from .scheduler import (AsyncioScheduler, QueueScheduler, Scheduler,
                        ThreadScheduler, get_scheduler, set_scheduler)
from .thread_pool import ThreadPoolExecutor


def configure():
    """Load the config file, then apply the log settings it contains.

    Without a call to this function, the default settings are used.
    """
    config.load()
    log.set_debug_mode(config.get('debug_mode'))
    log.set_logs_level(config.get('log_levels'))


__all__ = ['AggregateError', 'AsyncioScheduler', 'ChainingCycleError',
           'Deferred', 'Promise', 'PromiseError', 'QueueScheduler',
           'Rejection', 'Scheduler', 'ThreadPoolExecutor', 'ThreadScheduler',
           'TimeoutError', 'WaitError', 'configure', 'deferred',
           'get_scheduler', 'reduce_coroutine', 'set_scheduler',
           'wrap_promise']

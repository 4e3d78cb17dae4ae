# -*- coding: utf-8 -*-
"""Job queues used to run the Promise callbacks.

Callbacks registered on a Promise are never executed inside the call who
registered them, nor inside the call who settled the promise. Instead, each
callback is wrapped into a job, and the job is given to a scheduler.

All schedulers run the jobs in the order they've been submitted. A job
raising an exception is logged, and doesn't prevent the next jobs to run.

The scheduler used by all promises is global, and can be replaced by
``set_scheduler()``. By default, a ``QueueScheduler`` is used, unless the
config entry "scheduler" says otherwise: jobs run only when the program
yields control to the scheduler, by calling ``run()`` or by waiting a
promise with ``Promise.result()`` or ``Promise.exception()``.
"""

from collections import deque
from concurrent.futures import ThreadPoolExecutor
import asyncio
import logging
import threading
import time

from .common import config
from .errors import WaitError

_logger = logging.getLogger(__name__)


def _run_job(job):
    try:
        job()
    except Exception:
        _logger.exception('Promise job %r raised an exception!', job)


class Scheduler(object):
    """Base class of the schedulers."""

    def schedule(self, job):
        """Add a job to execute later.

        Args:
            job (callable): function without argument.
        """
        raise NotImplementedError()

    def wait_for(self, predicate, timeout, condition):
        """Block until `predicate()` becomes true.

        Used by the promises to wait for their settlement. The promise
        notifies `condition` when it's settled.

        Args:
            predicate (callable): returns True when the wait is over.
            timeout (float): maximum time to wait, in seconds. None means
                no limit.
            condition (threading.Condition): notified when the result of
                `predicate()` may have changed.
        Returns:
            boolean: the last result of `predicate()`.
        """
        with condition:
            return condition.wait_for(predicate, timeout)

    def wake_up(self):
        """Called each time a promise is settled."""
        pass


class ThreadScheduler(Scheduler):
    """Execute the jobs in a dedicated thread, one at a time.

    As there is only one worker, the jobs never run concurrently, and are
    executed in the submission order.

    The worker starts a job as soon as it's scheduled, so a callback can run
    at the same time as the code who registered it, even before ``then()``
    returns. Use this scheduler only when the callbacks don't share state
    with the thread creating the promises.
    Waiting for a promise from inside a callback is not possible: the wait
    would block the only thread able to settle it. It raises a WaitError.
    """

    def __init__(self, name='pledge'):
        """
        Args:
            name (str): prefix of the worker thread's name.
        """
        self._name = name
        self._lock = threading.Lock()
        self._executor = None
        self._local = threading.local()

    def schedule(self, job):
        with self._lock:
            if self._executor is None:
                _logger.debug('Start scheduler thread "%s"', self._name)
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix=self._name)
            self._executor.submit(self._run_in_worker, job)

    def _run_in_worker(self, job):
        self._local.in_worker = True
        _run_job(job)

    def in_worker(self):
        """Returns True if the caller is executed by the worker thread."""
        return getattr(self._local, 'in_worker', False)

    def wait_for(self, predicate, timeout, condition):
        if self.in_worker() and not predicate():
            raise WaitError()
        return Scheduler.wait_for(self, predicate, timeout, condition)

    def shutdown(self, wait=True):
        """Stop the worker thread.

        Jobs already submitted are executed before the thread stops. A new
        thread is started if another job is scheduled later.

        Args:
            wait (boolean): if True, returns only when all pending jobs are
                done.
        """
        with self._lock:
            executor, self._executor = self._executor, None
        if executor:
            _logger.debug('Stop scheduler thread "%s"', self._name)
            executor.shutdown(wait)


class QueueScheduler(Scheduler):
    """Store the jobs in a queue, until someone calls ``run()``.

    It's useful to control exactly when the callbacks are executed, eg. when
    the program has its own main loop, or in tests.

    Waiting for a promise runs the queued jobs, so a program without main
    loop can block on ``Promise.result()``. Only one thread at a time runs
    the jobs; other threads waiting for a promise just sleep until it's
    settled.
    """

    def __init__(self):
        self._condition = threading.Condition()
        self._jobs = deque()
        self._runner = None

    @property
    def pending(self):
        """Number of jobs waiting to be executed."""
        with self._condition:
            return len(self._jobs)

    def schedule(self, job):
        with self._condition:
            self._jobs.append(job)
            self._condition.notify_all()

    def wake_up(self):
        with self._condition:
            self._condition.notify_all()

    def run(self):
        """Execute all jobs, until the queue is empty.

        Jobs scheduled by the running jobs are executed too. A job can call
        ``run()`` again: the nested call continues to empty the same queue.
        If another thread is already running the jobs, returns immediately.

        Returns:
            int: number of executed jobs.
        """
        current = threading.current_thread()
        with self._condition:
            if self._runner not in (None, current):
                return 0
            previous_runner, self._runner = self._runner, current

        count = 0
        try:
            while True:
                with self._condition:
                    if not self._jobs:
                        return count
                    job = self._jobs.popleft()
                _run_job(job)
                count += 1
        finally:
            with self._condition:
                self._runner = previous_runner
                self._condition.notify_all()

    def wait_for(self, predicate, timeout, condition):
        """Run the jobs until `predicate()` becomes true.

        The `condition` of the promise is not used: ``wake_up()`` is called
        at each settlement instead.
        """
        current = threading.current_thread()
        end_time = None if timeout is None else time.monotonic() + timeout

        while True:
            self.run()
            with self._condition:
                if predicate():
                    return True
                if self._jobs and self._runner in (None, current):
                    continue
                if end_time is None:
                    self._condition.wait()
                else:
                    remaining = end_time - time.monotonic()
                    if remaining <= 0:
                        return False
                    self._condition.wait(remaining)


class AsyncioScheduler(Scheduler):
    """Execute the jobs as callbacks of an asyncio event loop.

    Waiting for a promise from a coroutine or a callback of the loop is not
    possible, and raises a WaitError.
    """

    def __init__(self, loop):
        """
        Args:
            loop (asyncio.AbstractEventLoop): the loop running the jobs.
        """
        self._loop = loop

    def schedule(self, job):
        self._loop.call_soon_threadsafe(_run_job, job)

    def wait_for(self, predicate, timeout, condition):
        try:
            running_loop = asyncio.get_running_loop()
        except RuntimeError:
            running_loop = None
        if running_loop is self._loop and not predicate():
            raise WaitError()
        return Scheduler.wait_for(self, predicate, timeout, condition)


_schedulers_factories = {
    'thread': ThreadScheduler,
    'queue': QueueScheduler,
}

_scheduler = None
_scheduler_lock = threading.Lock()


def _create_default_scheduler():
    kind = config.get('scheduler')
    if kind not in _schedulers_factories:
        _logger.warning('Unknown scheduler "%s" in config. The queue '
                        'scheduler will be used.', kind)
        kind = 'queue'
    _logger.debug('Use default scheduler "%s"', kind)
    return _schedulers_factories[kind]()


def get_scheduler():
    """Returns the scheduler used by all promises.

    The default scheduler is created at the first call.
    """
    global _scheduler

    with _scheduler_lock:
        if _scheduler is None:
            _scheduler = _create_default_scheduler()
        return _scheduler


def set_scheduler(scheduler):
    """Replace the scheduler used by all promises.

    Jobs already given to the previous scheduler stay in it.

    Args:
        scheduler (Scheduler): the new scheduler. If None, the default
            scheduler will be created again at the next use.
    Returns:
        Scheduler: the previous scheduler (can be None).
    """
    global _scheduler

    with _scheduler_lock:
        previous, _scheduler = _scheduler, scheduler
    return previous


def schedule(job):
    """Add a job to the current scheduler."""
    get_scheduler().schedule(job)

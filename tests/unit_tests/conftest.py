# -*- coding: utf-8 -*-

import pytest

from pledge import scheduler
from pledge.common import config


@pytest.fixture
def queue_scheduler(request):
    """Replace the promise scheduler by a QueueScheduler.

    Jobs are executed only when the test calls ``queue_scheduler.run()``,
    or waits for a promise.
    The previous scheduler is restored at the end of the test.

    Returns:
        QueueScheduler: the scheduler used during the test.
    """
    sched = scheduler.QueueScheduler()
    previous = scheduler.set_scheduler(sched)

    def _restore():
        scheduler.set_scheduler(previous)
    request.addfinalizer(_restore)
    return sched


@pytest.fixture
def thread_scheduler(request):
    """Replace the promise scheduler by a new ThreadScheduler.

    The worker thread is stopped at the end of the test.

    Returns:
        ThreadScheduler: the scheduler used during the test.
    """
    sched = scheduler.ThreadScheduler(name='test-pledge')
    previous = scheduler.set_scheduler(sched)

    def _restore():
        scheduler.set_scheduler(previous)
        sched.shutdown()
    request.addfinalizer(_restore)
    return sched


@pytest.fixture
def default_scheduler(request):
    """Drop the current scheduler, so the default one is created again.

    Returns:
        Scheduler: the default scheduler, built from the default config.
    """
    config.reset()
    previous = scheduler.set_scheduler(None)

    def _restore():
        scheduler.set_scheduler(previous)
    request.addfinalizer(_restore)
    return scheduler.get_scheduler()

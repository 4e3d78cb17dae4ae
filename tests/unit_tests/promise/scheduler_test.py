# -*- coding: utf-8 -*-

import asyncio
import logging
import threading

import pytest

from pledge import Promise, WaitError, scheduler
from pledge.common import config


class TestQueueScheduler(object):

    def test_jobs_wait_for_run(self):
        sched = scheduler.QueueScheduler()
        calls = []

        sched.schedule(lambda: calls.append(1))
        sched.schedule(lambda: calls.append(2))
        assert calls == []
        assert sched.pending == 2

        assert sched.run() == 2
        assert calls == [1, 2]
        assert sched.pending == 0

    def test_jobs_scheduled_while_running(self):
        sched = scheduler.QueueScheduler()
        calls = []

        def first():
            calls.append('first')
            sched.schedule(lambda: calls.append('nested'))

        sched.schedule(first)
        sched.schedule(lambda: calls.append('second'))

        assert sched.run() == 3
        assert calls == ['first', 'second', 'nested']

    def test_failing_job_is_logged(self, caplog):
        sched = scheduler.QueueScheduler()
        calls = []

        def failing_job():
            raise ValueError('job error')

        sched.schedule(failing_job)
        sched.schedule(lambda: calls.append('next'))

        with caplog.at_level(logging.ERROR, logger='pledge'):
            sched.run()

        assert calls == ['next']
        assert 'job error' in caplog.text

    def test_wait_for_runs_jobs(self):
        sched = scheduler.QueueScheduler()
        calls = []
        sched.schedule(lambda: calls.append(1))

        assert sched.wait_for(lambda: calls == [1], 1, threading.Condition())
        assert sched.pending == 0

    def test_wait_for_timeout(self):
        sched = scheduler.QueueScheduler()
        assert not sched.wait_for(lambda: False, 0.01, threading.Condition())

    def test_wait_for_job_scheduled_by_another_thread(self):
        sched = scheduler.QueueScheduler()
        threads = []

        def job():
            threads.append(threading.current_thread())

        timer = threading.Timer(0.05, sched.schedule, args=(job,))
        timer.start()
        assert sched.wait_for(lambda: threads, 1, threading.Condition())
        timer.join()

        # The job is executed by the waiting thread.
        assert threads == [threading.current_thread()]

    def test_run_from_another_thread_while_running(self):
        sched = scheduler.QueueScheduler()
        counts = []

        def job():
            t = threading.Thread(target=lambda: counts.append(sched.run()))
            t.start()
            t.join()

        sched.schedule(job)
        sched.schedule(lambda: None)

        assert sched.run() == 2
        assert counts == [0]


class TestThreadScheduler(object):

    def test_jobs_run_in_order_in_another_thread(self):
        sched = scheduler.ThreadScheduler(name='test-thread-scheduler')
        threads = []
        calls = []
        done = threading.Event()

        for i in range(10):
            sched.schedule(lambda i=i: calls.append(i))
        sched.schedule(lambda: threads.append(threading.current_thread()))
        sched.schedule(done.set)

        assert done.wait(1)
        sched.shutdown()

        assert calls == list(range(10))
        assert threads[0] is not threading.current_thread()
        assert threads[0].name.startswith('test-thread-scheduler')

    def test_restart_after_shutdown(self):
        sched = scheduler.ThreadScheduler()
        done = threading.Event()
        sched.shutdown()

        sched.schedule(done.set)
        assert done.wait(1)
        sched.shutdown()


class TestAsyncioScheduler(object):

    def test_promise_callbacks_in_event_loop(self, request):
        loop = asyncio.new_event_loop()
        request.addfinalizer(loop.close)
        previous = scheduler.set_scheduler(scheduler.AsyncioScheduler(loop))
        request.addfinalizer(lambda: scheduler.set_scheduler(previous))

        future = loop.create_future()
        p = Promise.resolve(20).then(lambda value: value + 1)
        p.then(future.set_result)

        assert loop.run_until_complete(asyncio.wait_for(future, 1)) == 21

    def test_wait_inside_event_loop(self, request):
        loop = asyncio.new_event_loop()
        request.addfinalizer(loop.close)
        previous = scheduler.set_scheduler(scheduler.AsyncioScheduler(loop))
        request.addfinalizer(lambda: scheduler.set_scheduler(previous))

        async def wait_promise():
            return Promise.resolve(1).then(lambda value: value).result(1)

        with pytest.raises(WaitError):
            loop.run_until_complete(wait_promise())


class TestDefaultScheduler(object):

    def test_callback_runs_after_the_current_code(self, default_scheduler):
        for _ in range(300):
            order = []
            p = Promise.resolve(1).then(lambda _: order.append('handler'))
            order.append('after')

            p.result(1)
            assert order == ['after', 'handler']

    def test_callbacks_wait_for_the_host(self, default_scheduler):
        calls = []
        Promise.resolve(1).then(calls.append)
        assert calls == []

        assert default_scheduler.run() == 1
        assert calls == [1]

    def test_result_waits_for_another_thread(self, default_scheduler):
        settle = []
        p = Promise(lambda ok, error: settle.append(ok))
        p2 = p.then(lambda value: value * 2)

        timer = threading.Timer(0.05, settle[0], args=(21,))
        timer.start()
        assert p2.result(1) == 42
        timer.join()


class TestWaitInsideCallback(object):

    def test_with_queue_scheduler(self, queue_scheduler):
        p = Promise.resolve(1).then(
            lambda v: Promise.resolve(v).then(lambda v: v + 1).result(2))

        assert p.result(1) == 2

    def test_with_thread_scheduler(self, thread_scheduler):
        p = Promise.resolve(1).then(
            lambda v: Promise.resolve(v).then(lambda v: v + 1).result(2))

        assert isinstance(p.exception(1), WaitError)

    def test_settled_promise_with_thread_scheduler(self, thread_scheduler):
        inner = Promise.resolve('done')
        p = Promise.resolve(1).then(lambda v: inner.result())

        assert p.result(1) == 'done'

    def test_in_worker(self, thread_scheduler):
        p = Promise.resolve(1).then(lambda v: thread_scheduler.in_worker())

        assert p.result(1) is True
        assert not thread_scheduler.in_worker()


class TestGlobalScheduler(object):

    def test_set_scheduler_returns_previous(self, queue_scheduler):
        other = scheduler.QueueScheduler()
        assert scheduler.set_scheduler(other) is queue_scheduler
        assert scheduler.get_scheduler() is other
        assert scheduler.set_scheduler(queue_scheduler) is other

    def test_schedule_uses_current_scheduler(self, queue_scheduler):
        calls = []
        scheduler.schedule(lambda: calls.append(True))

        assert queue_scheduler.pending == 1
        queue_scheduler.run()
        assert calls == [True]

    def test_default_scheduler_from_config(self, request):
        previous = scheduler.set_scheduler(None)
        request.addfinalizer(lambda: scheduler.set_scheduler(previous))
        request.addfinalizer(config.reset)

        config._config_parser.set('config', 'scheduler', 'thread')
        assert isinstance(scheduler.get_scheduler(),
                          scheduler.ThreadScheduler)

    def test_default_scheduler_is_queue(self, default_scheduler):
        assert isinstance(default_scheduler, scheduler.QueueScheduler)
        assert scheduler.get_scheduler() is default_scheduler

    def test_unknown_scheduler_in_config(self, request, caplog):
        previous = scheduler.set_scheduler(None)
        request.addfinalizer(lambda: scheduler.set_scheduler(previous))
        request.addfinalizer(config.reset)

        config._config_parser.set('config', 'scheduler', 'unknown')
        with caplog.at_level(logging.WARNING, logger='pledge'):
            sched = scheduler.get_scheduler()

        assert isinstance(sched, scheduler.QueueScheduler)
        assert 'unknown' in caplog.text

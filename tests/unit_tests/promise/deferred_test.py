# -*- coding: utf-8 -*-

import pytest

from pledge import Deferred, Promise, TimeoutError, deferred


@pytest.mark.usefixtures('thread_scheduler')
class TestDeferred(object):

    def test_deferred_resolve_promise(self):
        df = Deferred()
        assert isinstance(df.promise, Promise)

        with pytest.raises(TimeoutError):
            df.promise.result(0.001)
        df.resolve('Value')
        assert df.promise.result(1) == 'Value'

    def test_deferred_reject_promise(self):
        class MyException(Exception):
            pass

        df = Deferred()
        with pytest.raises(TimeoutError):
            df.promise.result(0.001)
        df.reject(MyException())

        with pytest.raises(MyException):
            df.promise.result(1)

    def test_deferred_factory(self):
        df = deferred()
        assert isinstance(df, Deferred)
        assert df.promise.state == Promise.PENDING

        df.resolve(Promise.resolve('followed'))
        assert df.promise.result(1) == 'followed'

    def test_deferred_factory_creates_distinct_promises(self):
        assert deferred().promise is not deferred().promise

"""Tests for inline and offloaded execution"""
import gc
import threading

import pytest

from app.core.dispatch import InlineDispatcher, OffloadedDispatcher
from app.core.locks import KeyedLocks


def _current_thread_name():
    return threading.current_thread().name


class TestInlineDispatcher:
    def test_runs_on_caller_thread(self, inline):
        assert inline.run_await(_current_thread_name) == threading.current_thread().name

    def test_passes_arguments(self, inline):
        assert inline.run_await(lambda a, b=0: a + b, 2, b=3) == 5

    def test_raises_errors_unchanged(self, inline):
        err = ValueError("boom")

        def fail():
            raise err

        with pytest.raises(ValueError) as exc_info:
            inline.run_await(fail)
        assert exc_info.value is err


class TestOffloadedDispatcher:
    def test_runs_on_worker_thread(self, offloaded):
        name = offloaded.run_await(_current_thread_name)
        assert name.startswith("cart-worker")
        assert name != threading.current_thread().name

    def test_waits_for_result(self, offloaded):
        done = threading.Event()

        def work():
            done.wait(timeout=1)
            return "finished"

        threading.Timer(0.05, done.set).start()
        assert offloaded.run_await(work) == "finished"
        assert done.is_set()

    def test_raises_worker_error_unchanged(self, offloaded):
        err = LookupError("missing")

        def fail():
            raise err

        with pytest.raises(LookupError) as exc_info:
            offloaded.run_await(fail)
        assert exc_info.value is err

    def test_default_pool_size(self):
        dispatcher = OffloadedDispatcher()
        try:
            assert dispatcher.run_await(lambda: 42) == 42
        finally:
            dispatcher.shutdown()


def test_dispatcher_names():
    assert InlineDispatcher().name == "sync"
    assert OffloadedDispatcher.name == "async"


class TestKeyedLocks:
    def test_same_key_is_exclusive(self):
        locks = KeyedLocks()
        entered = threading.Event()
        release = threading.Event()

        def holder():
            with locks.hold("u1"):
                entered.set()
                release.wait(timeout=2)

        t = threading.Thread(target=holder)
        t.start()
        entered.wait(timeout=2)

        assert locks._lock_for("u1").locked()
        assert not locks._lock_for("u2").locked()

        release.set()
        t.join()
        assert not locks._lock_for("u1").locked()

    def test_same_lock_reused_per_key(self):
        locks = KeyedLocks()
        assert locks._lock_for("u1") is locks._lock_for("u1")
        assert locks._lock_for("u1") is not locks._lock_for("u2")

    def test_released_keys_are_dropped(self):
        locks = KeyedLocks()

        for i in range(100):
            with locks.hold(f"user-{i}"):
                assert f"user-{i}" in locks._locks

        gc.collect()
        assert len(locks._locks) == 0

    def test_waiting_caller_shares_the_held_lock(self):
        locks = KeyedLocks()
        entered = threading.Event()
        release = threading.Event()
        order = []

        def holder():
            with locks.hold("u1"):
                entered.set()
                release.wait(timeout=2)
                order.append("first")

        def waiter():
            entered.wait(timeout=2)
            with locks.hold("u1"):
                order.append("second")

        threads = [threading.Thread(target=holder), threading.Thread(target=waiter)]
        for t in threads:
            t.start()
        entered.wait(timeout=2)
        release.set()
        for t in threads:
            t.join()

        assert order == ["first", "second"]

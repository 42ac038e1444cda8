"""
Tests for the signal and promise protocol runtime.
"""

import threading
import time

import pytest

from native_spec_to_code.pipeline.analyzer import (
    Method,
    NumberType,
    Param,
    PromiseType,
    Signal,
    StringType,
    VoidType,
    normalize,
)
from native_spec_to_code.pipeline.config import ProtocolConfig
from native_spec_to_code.protocol import (
    Deferred,
    ListenerRegistry,
    ModuleInvalidatedError,
    NativeModuleHost,
    PromiseState,
    PromiseStateError,
    ProtocolError,
    QueueCallInvoker,
    SignalRouter,
    WorkerPool,
    WorkerPoolClosedError,
)

SCHEMA = normalize(
    "Counter",
    [
        Method("add", (Param("a", NumberType()), Param("b", NumberType())), NumberType()),
        Method("fetchName", (Param("id", NumberType()),), PromiseType(StringType())),
        Method("fail", (), PromiseType(VoidType())),
        Method("tick", (), VoidType()),
    ],
    [Signal("onTick", NumberType()), Signal("onReset")],
)


class Counter:
    def __init__(self, ctx):
        self.ctx = ctx
        self.count = 0

    def add(self, a, b):
        return a + b

    def fetch_name(self, id):
        return f"user-{id:g}"

    def fail(self):
        raise ValueError("boom")

    def tick(self):
        self.count += 1
        self.ctx.emit("onTick", self.count)


@pytest.fixture
def invoker():
    return QueueCallInvoker()


@pytest.fixture
def router():
    return SignalRouter()


@pytest.fixture
def host(invoker, router):
    host = NativeModuleHost(SCHEMA, Counter, router, invoker, ProtocolConfig(worker_pool_size=2))
    yield host
    host.invalidate()


def drain(invoker, expected, timeout=5.0):
    """Run callbacks on the owning thread until `expected` have run."""
    ran = 0
    deadline = time.monotonic() + timeout
    while ran < expected and time.monotonic() < deadline:
        ran += invoker.run_pending(timeout=0.05)
    return ran


class TestErrors:
    def test_hierarchy(self):
        for error in (PromiseStateError, ModuleInvalidatedError, WorkerPoolClosedError):
            assert issubclass(error, ProtocolError)


class TestDeferred:
    def test_resolve_once(self, invoker):
        deferred = Deferred(invoker)
        values = []
        deferred.then(values.append)
        assert deferred.state == PromiseState.PENDING
        deferred.resolve(42)
        assert deferred.state == PromiseState.FULFILLED
        assert values == []
        assert invoker.run_pending() == 1
        assert values == [42]
        with pytest.raises(PromiseStateError, match="already fulfilled"):
            deferred.resolve(43)
        with pytest.raises(PromiseStateError):
            deferred.reject(RuntimeError("late"))
        assert deferred.result() == 42

    def test_reject(self, invoker):
        deferred = Deferred(invoker)
        errors = []
        deferred.then(on_rejected=errors.append)
        error = RuntimeError("nope")
        deferred.reject(error)
        invoker.run_pending()
        assert errors == [error]
        with pytest.raises(RuntimeError, match="nope"):
            deferred.result()
        with pytest.raises(PromiseStateError, match="already rejected"):
            deferred.reject(error)

    def test_then_after_settlement_goes_through_invoker(self, invoker):
        deferred = Deferred(invoker)
        deferred.resolve("done")
        values = []
        deferred.then(values.append)
        assert values == []
        invoker.run_pending()
        assert values == ["done"]

    def test_result_timeout(self, invoker):
        with pytest.raises(TimeoutError):
            Deferred(invoker).result(timeout=0.01)

    def test_concurrent_settlement_exactly_once(self, invoker):
        deferred = Deferred(invoker)
        outcomes = []
        barrier = threading.Barrier(8)

        def settle(i):
            barrier.wait()
            try:
                deferred.resolve(i)
                outcomes.append("ok")
            except PromiseStateError:
                outcomes.append("error")

        threads = [threading.Thread(target=settle, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert outcomes.count("ok") == 1
        assert outcomes.count("error") == 7


class TestCallInvoker:
    def test_runs_in_order(self, invoker):
        calls = []
        for i in range(3):
            invoker.invoke_async(lambda i=i: calls.append(i))
        assert invoker.pending == 3
        assert invoker.run_pending() == 3
        assert calls == [0, 1, 2]
        assert invoker.run_pending(timeout=0.01) == 0

    def test_owner_thread_only(self, invoker):
        errors = []

        def run():
            try:
                invoker.run_pending()
            except RuntimeError as e:
                errors.append(e)

        thread = threading.Thread(target=run)
        thread.start()
        thread.join()
        assert len(errors) == 1


class TestListenerRegistry:
    def test_ids_increase(self):
        registry = ListenerRegistry()
        first = registry.add("a", print)
        second = registry.add("b", print)
        assert second > first
        assert registry.remove("a", first)
        assert registry.add("a", print) > second

    def test_snapshot_and_remove(self):
        registry = ListenerRegistry()
        ids = [registry.add("a", print) for _ in range(3)]
        assert [listener.id for listener in registry.snapshot("a")] == ids
        assert registry.remove("a", ids[1])
        assert not registry.remove("a", ids[1])
        assert not registry.contains("a", ids[1])
        assert len(registry) == 2
        registry.clear()
        assert registry.snapshot("a") == []


class TestSignalRouter:
    def test_route(self, router):
        received = []
        router.register(7, lambda signal, payload: received.append((signal, payload)))
        assert router.emit(7, "onTick", 1)
        assert router.unregister(7)
        assert not router.unregister(7)
        assert not router.emit(7, "onTick", 2)
        assert received == [("onTick", 1)]


class TestWorkerPool:
    def test_rejects_after_shutdown(self):
        pool = WorkerPool(1)
        assert pool.submit(lambda: 1).result(timeout=5) == 1
        pool.shutdown()
        pool.shutdown()
        assert pool.is_shutdown
        with pytest.raises(WorkerPoolClosedError):
            pool.submit(lambda: 1)

    def test_size_must_be_positive(self):
        with pytest.raises(ValueError):
            WorkerPool(0)


class TestNativeModuleHost:
    def test_sync_call(self, host):
        assert host.call("add", 1, 2) == 3

    def test_unknown_method_and_arity(self, host):
        with pytest.raises(AttributeError):
            host.call("missing")
        with pytest.raises(TypeError, match="Expected 2 arguments, got 1"):
            host.call("add", 1)

    def test_async_call_settles_through_invoker(self, host, invoker):
        deferred = host.call("fetchName", 7)
        values = []
        deferred.then(values.append)
        assert deferred.result(timeout=5) == "user-7"
        assert drain(invoker, 1) == 1
        assert values == ["user-7"]

    def test_async_rejection(self, host, invoker):
        deferred = host.call("fail")
        errors = []
        deferred.then(on_rejected=errors.append)
        with pytest.raises(ValueError, match="boom"):
            deferred.result(timeout=5)
        assert deferred.state == PromiseState.REJECTED
        drain(invoker, 1)
        assert [str(e) for e in errors] == ["boom"]

    def test_signal_delivery(self, host, invoker):
        received = []
        host.subscribe("onTick", received.append)
        host.call("tick")
        host.call("tick")
        assert received == []
        invoker.run_pending()
        assert received == [1, 2]

    def test_listener_ids_are_monotonic(self, host):
        first = host.subscribe("onTick", print)
        second = host.subscribe("onReset", print)
        assert second.listener_id > first.listener_id

    def test_no_delivery_after_unsubscribe(self, host, invoker):
        received = []
        subscription = host.subscribe("onTick", received.append)
        host.call("tick")
        assert subscription.unsubscribe()
        assert not subscription()
        invoker.run_pending()
        assert received == []

    def test_unknown_signal(self, host):
        with pytest.raises(AttributeError):
            host.subscribe("onMissing", print)

    def test_invalidate(self, host, invoker, router):
        received = []
        host.subscribe("onTick", received.append)
        host.call("tick")
        host.invalidate()
        host.invalidate()
        assert host.is_invalidated
        assert not router.is_registered(host.instance_id)
        invoker.run_pending()
        assert received == []
        assert not host.context.emit("onTick", 3)
        with pytest.raises(ModuleInvalidatedError):
            host.call("add", 1, 2)
        with pytest.raises(ModuleInvalidatedError):
            host.subscribe("onTick", print)

    def test_invalidate_waits_for_in_flight_calls(self, invoker, router):
        started = threading.Event()

        class Slow:
            def __init__(self, ctx):
                pass

            def fetch_name(self, id):
                started.set()
                time.sleep(0.05)
                return "slow"

        host = NativeModuleHost(SCHEMA, Slow, router, invoker)
        deferred = host.call("fetchName", 1)
        assert started.wait(timeout=5)
        host.invalidate()
        assert deferred.done()
        assert deferred.result() == "slow"

    def test_instances_are_isolated(self, invoker, router):
        with NativeModuleHost(SCHEMA, Counter, router, invoker) as a, NativeModuleHost(
            SCHEMA, Counter, router, invoker
        ) as b:
            assert a.instance_id != b.instance_id
            received = []
            b.subscribe("onTick", received.append)
            a.call("tick")
            invoker.run_pending()
            assert received == []
        assert not router.is_registered(a.instance_id)
        assert not router.is_registered(b.instance_id)

"""Event system tests.

These tests verify:
- ResolutionEventBridge pub/sub functionality
- ResolutionEventNames constants
- Events published by CapabilityResolver during resolution
"""

from __future__ import annotations

from typing import Any

import pytest

from tests.handles import (
    DATA_SOURCE,
    POOLED_DATA_SOURCE,
    BrokenWrapper,
    ConnectionPool,
    DataSourceProxy,
    DelegatingDataSource,
    SimpleDataSource,
)
from unwrap_core import (
    CapabilityRegistry,
    CapabilityRequest,
    CapabilityResolver,
    CollaboratorError,
    RelationKind,
    ResolutionCycleError,
    ResolutionEventBridge,
    ResolutionEventNames,
)


class TestResolutionEventBridge:
    """Tests for ResolutionEventBridge pub/sub functionality."""

    def setup_method(self):
        """Reset singleton before each test."""
        ResolutionEventBridge.reset_instance()

    def teardown_method(self):
        """Clean up after each test."""
        ResolutionEventBridge.reset_instance()

    def test_singleton_instance(self):
        assert ResolutionEventBridge.instance() is ResolutionEventBridge.instance()

    def test_reset_instance(self):
        bridge1 = ResolutionEventBridge.instance()
        ResolutionEventBridge.reset_instance()

        assert ResolutionEventBridge.instance() is not bridge1

    def test_start_stop(self):
        bridge = ResolutionEventBridge.instance()
        assert not bridge.is_active

        bridge.start()
        assert bridge.is_active

        bridge.stop()
        assert not bridge.is_active

    def test_start_idempotent(self):
        bridge = ResolutionEventBridge.instance()
        bridge.start()
        bridge.start()

        assert bridge.is_active

    def test_stop_idempotent(self):
        bridge = ResolutionEventBridge.instance()
        bridge.stop()

        assert not bridge.is_active

    def test_subscribe_publish(self):
        bridge = ResolutionEventBridge.instance()
        bridge.start()

        received = []
        bridge.subscribe("test.event", lambda x, y: received.append((x, y)))
        bridge.publish("test.event", "a", "b")

        assert received == [("a", "b")]

    def test_subscribe_once(self):
        bridge = ResolutionEventBridge.instance()
        bridge.start()

        received = []
        bridge.subscribe_once("test.event", lambda x: received.append(x))
        bridge.publish("test.event", 1)
        bridge.publish("test.event", 2)

        assert received == [1]

    def test_unsubscribe(self):
        bridge = ResolutionEventBridge.instance()
        bridge.start()

        received = []

        def handler(x):
            received.append(x)

        bridge.subscribe("test.event", handler)
        bridge.publish("test.event", "first")
        bridge.unsubscribe("test.event", handler)
        bridge.publish("test.event", "second")

        assert received == ["first"]

    def test_publish_when_inactive_is_dropped(self):
        bridge = ResolutionEventBridge.instance()

        received = []
        bridge.subscribe("test.event", lambda x: received.append(x))
        bridge.publish("test.event", "data")

        assert received == []

    def test_stop_removes_listeners(self):
        bridge = ResolutionEventBridge.instance()
        bridge.start()
        bridge.subscribe("test.event", lambda: None)
        assert bridge.listener_count("test.event") == 1

        bridge.stop()

        assert bridge.listener_count("test.event") == 0

    def test_event_schema(self):
        schema = ResolutionEventBridge.instance().event_schema

        assert set(schema) == {
            ResolutionEventNames.RESOLUTION_STARTED,
            ResolutionEventNames.RELATION_FOLLOWED,
            ResolutionEventNames.STRATEGY_FAILED,
            ResolutionEventNames.CYCLE_DETECTED,
            ResolutionEventNames.RESOLUTION_COMPLETED,
        }

    def test_event_schema_is_a_copy(self):
        bridge = ResolutionEventBridge.instance()
        bridge.event_schema.clear()

        assert bridge.event_schema


class TestResolutionEventNames:
    """Tests for ResolutionEventNames constants."""

    def test_names(self):
        assert ResolutionEventNames.RESOLUTION_STARTED == "resolution.started"
        assert ResolutionEventNames.RELATION_FOLLOWED == "resolution.relation_followed"
        assert ResolutionEventNames.STRATEGY_FAILED == "resolution.strategy_failed"
        assert ResolutionEventNames.CYCLE_DETECTED == "resolution.cycle_detected"
        assert ResolutionEventNames.RESOLUTION_COMPLETED == "resolution.completed"


class Recorder:
    """Collects every resolution event published on a bridge."""

    def __init__(self, bridge: ResolutionEventBridge) -> None:
        self.events: list[tuple[str, tuple[Any, ...]]] = []
        for event in bridge.event_schema:
            bridge.subscribe(event, self._listener(event))

    def _listener(self, event: str):
        def record(*args: Any) -> None:
            self.events.append((event, args))

        return record

    def names(self) -> list[str]:
        return [event for event, _ in self.events]

    def of(self, event: str) -> list[tuple[Any, ...]]:
        return [args for name, args in self.events if name == event]


@pytest.fixture
def observed_resolver(
    registry: CapabilityRegistry, event_bridge: ResolutionEventBridge
) -> CapabilityResolver:
    return CapabilityResolver.default(registry=registry, events=event_bridge)


class TestResolverEvents:
    """Tests for events published by CapabilityResolver."""

    def test_direct_satisfaction(
        self, observed_resolver: CapabilityResolver, event_bridge: ResolutionEventBridge
    ):
        recorder = Recorder(event_bridge)
        handle = SimpleDataSource()

        observed_resolver.unwrap(handle, DATA_SOURCE)

        assert recorder.names() == [
            ResolutionEventNames.RESOLUTION_STARTED,
            ResolutionEventNames.RESOLUTION_COMPLETED,
        ]
        started_handle, request = recorder.of(ResolutionEventNames.RESOLUTION_STARTED)[0]
        assert started_handle is handle
        assert request == CapabilityRequest.for_target(DATA_SOURCE)
        assert recorder.of(ResolutionEventNames.RESOLUTION_COMPLETED)[0][1] is handle

    def test_relations_followed(
        self, observed_resolver: CapabilityResolver, event_bridge: ResolutionEventBridge
    ):
        recorder = Recorder(event_bridge)
        pool = ConnectionPool()
        proxy = DataSourceProxy(pool)
        handle = DelegatingDataSource(proxy)

        assert observed_resolver.unwrap(handle, POOLED_DATA_SOURCE) is pool

        assert recorder.of(ResolutionEventNames.RELATION_FOLLOWED) == [
            (handle, RelationKind.DELEGATE, 0),
            (proxy, RelationKind.PROXY_TARGET, 1),
        ]
        assert recorder.names()[-1] == ResolutionEventNames.RESOLUTION_COMPLETED

    def test_strategy_failure(
        self, observed_resolver: CapabilityResolver, event_bridge: ResolutionEventBridge
    ):
        recorder = Recorder(event_bridge)
        pool = ConnectionPool()

        assert observed_resolver.unwrap(BrokenWrapper(delegate=pool), POOLED_DATA_SOURCE) is pool

        failures = recorder.of(ResolutionEventNames.STRATEGY_FAILED)
        assert len(failures) == 1
        strategy_name, error = failures[0]
        assert strategy_name == "protocol_unwrap"
        assert isinstance(error, CollaboratorError)
        assert error.operation == "supports"

    def test_capability_check_failure(self, event_bridge: ResolutionEventBridge):
        pool = ConnectionPool()
        handle = DelegatingDataSource(pool)

        class RaisingRegistry(CapabilityRegistry):
            def exhibits(self, candidate: Any, capability: Any) -> bool:
                if candidate is handle:
                    raise RuntimeError("capability check exploded")
                return super().exhibits(candidate, capability)

        resolver = CapabilityResolver.default(registry=RaisingRegistry(), events=event_bridge)
        recorder = Recorder(event_bridge)

        assert resolver.unwrap(handle, POOLED_DATA_SOURCE) is pool

        failures = recorder.of(ResolutionEventNames.STRATEGY_FAILED)
        assert len(failures) == 1
        step, error = failures[0]
        assert step == "direct"
        assert isinstance(error, CollaboratorError)

    def test_cycle_detected(
        self, observed_resolver: CapabilityResolver, event_bridge: ResolutionEventBridge
    ):
        recorder = Recorder(event_bridge)
        first = DelegatingDataSource()
        second = DelegatingDataSource(first)
        first.target = second

        assert observed_resolver.unwrap(first, POOLED_DATA_SOURCE) is None

        cycles = recorder.of(ResolutionEventNames.CYCLE_DETECTED)
        assert len(cycles) == 1
        cycle_handle, depth, error = cycles[0]
        assert cycle_handle is first
        assert depth == 2
        assert isinstance(error, ResolutionCycleError)
        assert error.metadata["depth"] == 2
        completed = recorder.of(ResolutionEventNames.RESOLUTION_COMPLETED)
        assert completed[0][1] is None

    def test_failing_listener_does_not_change_result(
        self, observed_resolver: CapabilityResolver, event_bridge: ResolutionEventBridge
    ):
        def broken_listener(*args: Any) -> None:
            raise RuntimeError("listener bug")

        event_bridge.subscribe(ResolutionEventNames.RESOLUTION_STARTED, broken_listener)
        event_bridge.subscribe(ResolutionEventNames.RELATION_FOLLOWED, broken_listener)
        pool = ConnectionPool()

        assert observed_resolver.unwrap(DelegatingDataSource(pool), POOLED_DATA_SOURCE) is pool

    def test_inactive_bridge_receives_nothing(self, registry: CapabilityRegistry):
        bridge = ResolutionEventBridge()
        received = []
        bridge.subscribe(ResolutionEventNames.RESOLUTION_STARTED, lambda *a: received.append(a))
        resolver = CapabilityResolver.default(registry=registry, events=bridge)

        resolver.unwrap(SimpleDataSource(), DATA_SOURCE)

        assert received == []

    def test_resolver_without_bridge(self, resolver: CapabilityResolver):
        assert resolver.unwrap(SimpleDataSource(), DATA_SOURCE) is not None

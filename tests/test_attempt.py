"""Tests for the best-effort collaborator call helpers."""

from __future__ import annotations

from tests.handles import (
    CLOSEABLE,
    CONNECTION_POOL,
    DATA_SOURCE,
    BrokenWrapper,
    ForwardingProxy,
    ConnectionPool,
    SimpleDataSource,
    WrappingDataSource,
)
from unwrap_core import Attempt, CollaboratorError, attempt, safe_produce


class TestAttempt:
    """Tests for attempt()."""

    def test_present_value(self):
        outcome = attempt(lambda: "conn")

        assert outcome.is_present is True
        assert outcome.failed is False
        assert outcome.value == "conn"

    def test_none_is_absent_without_error(self):
        outcome = attempt(lambda: None)

        assert outcome.is_present is False
        assert outcome.error is None

    def test_exception_becomes_absent(self):
        def explode():
            raise ValueError("boom")

        outcome = attempt(explode, description="explode")

        assert outcome.is_present is False
        assert outcome.failed is True
        assert isinstance(outcome.error, CollaboratorError)
        assert isinstance(outcome.error.cause, ValueError)
        assert outcome.error.operation == "explode"
        assert "boom" in outcome.error.message

    def test_passes_arguments(self):
        outcome = attempt(lambda a, b=0: a + b, 1, b=2)

        assert outcome.value == 3

    def test_description_defaults_to_function_name(self):
        def inner_target():
            raise RuntimeError("gone")

        outcome = attempt(inner_target)

        assert outcome.error is not None
        assert outcome.error.operation == "inner_target"

    def test_constructors(self):
        assert Attempt.present(1).is_present
        assert not Attempt.absent().is_present
        assert Attempt.absent(CollaboratorError("x")).failed


class TestSafeProduce:
    """Tests for safe_produce()."""

    def test_produces_supported_capability(self):
        pool = ConnectionPool()
        wrapper = WrappingDataSource(pool, exposes={DATA_SOURCE})

        outcome = safe_produce(wrapper, DATA_SOURCE)

        assert outcome.value is pool
        assert wrapper.supports_calls == [DATA_SOURCE]

    def test_unsupported_capability_is_absent(self):
        wrapper = WrappingDataSource(ConnectionPool(), exposes={DATA_SOURCE})

        outcome = safe_produce(wrapper, CLOSEABLE)

        assert not outcome.is_present
        assert not outcome.failed

    def test_non_wrapper_is_absent(self):
        outcome = safe_produce(SimpleDataSource(), DATA_SOURCE)

        assert not outcome.is_present
        assert not outcome.failed

    def test_forwarded_wrapper_methods_are_ignored(self):
        wrapper = WrappingDataSource(ConnectionPool(), exposes={DATA_SOURCE})

        outcome = safe_produce(ForwardingProxy(wrapper), DATA_SOURCE)

        assert not outcome.is_present
        assert not outcome.failed
        assert wrapper.supports_calls == []

    def test_concrete_capability_never_asked(self):
        wrapper = WrappingDataSource(ConnectionPool(), exposes={CONNECTION_POOL})

        outcome = safe_produce(wrapper, CONNECTION_POOL)

        assert not outcome.is_present
        assert wrapper.supports_calls == []

    def test_supports_failure_swallowed(self):
        outcome = safe_produce(BrokenWrapper(), DATA_SOURCE)

        assert not outcome.is_present
        assert outcome.error is not None
        assert outcome.error.operation == "supports"

    def test_produce_failure_swallowed(self):
        outcome = safe_produce(BrokenWrapper(fail_supports=False), DATA_SOURCE)

        assert not outcome.is_present
        assert outcome.error is not None
        assert outcome.error.operation == "produce"

    def test_produced_none_is_absent(self):
        outcome = safe_produce(
            BrokenWrapper(fail_supports=False, fail_produce=False), DATA_SOURCE
        )

        assert not outcome.is_present
        assert not outcome.failed

"""Resolution event bridge.

This module provides the ResolutionEventBridge class that wraps pyee's
EventEmitter so callers can observe resolutions without subclassing the
resolver.

Example:
    >>> from unwrap_core import CapabilityResolver, ResolutionEventBridge
    >>>
    >>> bridge = ResolutionEventBridge.instance()
    >>> bridge.start()
    >>>
    >>> def on_relation(handle, relation, depth):
    ...     print(f"hop {depth}: {relation.value}")
    ...
    >>> bridge.subscribe(ResolutionEventNames.RELATION_FOLLOWED, on_relation)
    >>> resolver = CapabilityResolver.default(events=bridge)
    >>> resolver.unwrap(handle, DATA_SOURCE)
    >>>
    >>> bridge.stop()
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pyee.base import EventEmitter

from .logging import log_debug, log_info, log_warn


class ResolutionEventNames:
    """Constants for event names published during resolution.

    Attributes:
        RESOLUTION_STARTED: A resolution began (handle, request).
        RELATION_FOLLOWED: A relation was followed (handle, relation, depth).
        STRATEGY_FAILED: A collaborator failure was recovered (step, error).
        CYCLE_DETECTED: A handle was visited twice (handle, depth, error).
        RESOLUTION_COMPLETED: A resolution ended (request, result).
    """

    RESOLUTION_STARTED = "resolution.started"
    RELATION_FOLLOWED = "resolution.relation_followed"
    STRATEGY_FAILED = "resolution.strategy_failed"
    CYCLE_DETECTED = "resolution.cycle_detected"
    RESOLUTION_COMPLETED = "resolution.completed"


class ResolutionEventBridge:
    """In-process event bus for resolution events.

    A process-wide instance is available through ``instance()``, but
    resolvers only publish to a bridge they were given explicitly.
    """

    _instance: ResolutionEventBridge | None = None

    def __init__(self) -> None:
        """Initialize the bridge.

        Creates a new pyee EventEmitter and sets up the event schema.
        """
        self._emitter = EventEmitter()
        self._active = False
        self._setup_event_schema()

    @classmethod
    def instance(cls) -> ResolutionEventBridge:
        """Get the singleton ResolutionEventBridge instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance, stopping it first if active."""
        if cls._instance is not None:
            cls._instance.stop()
        cls._instance = None

    def _setup_event_schema(self) -> None:
        """Define the event schema for documentation."""
        self._event_schema: dict[str, str] = {
            ResolutionEventNames.RESOLUTION_STARTED: "tuple[Any, CapabilityRequest]",
            ResolutionEventNames.RELATION_FOLLOWED: "tuple[Any, RelationKind, int]",
            ResolutionEventNames.STRATEGY_FAILED: "tuple[str, CollaboratorError]",
            ResolutionEventNames.CYCLE_DETECTED: "tuple[Any, int, ResolutionCycleError]",
            ResolutionEventNames.RESOLUTION_COMPLETED: "tuple[CapabilityRequest, Any | None]",
        }

    def start(self) -> None:
        """Activate the bridge. Calling start() twice is a no-op."""
        if self._active:
            return
        self._active = True
        log_info("ResolutionEventBridge started")

    def stop(self) -> None:
        """Deactivate the bridge and remove all listeners."""
        if not self._active:
            return
        self._active = False
        self._emitter.remove_all_listeners()
        log_info("ResolutionEventBridge stopped")

    def subscribe(self, event: str, handler: Callable[..., Any]) -> None:
        """Subscribe to an event.

        Args:
            event: Event name to subscribe to.
            handler: Callback invoked when the event is published.
        """
        self._emitter.on(event, handler)
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Subscribed to {event}: {handler_name}")

    def subscribe_once(self, event: str, handler: Callable[..., Any]) -> None:
        """Subscribe to an event for a single invocation."""
        self._emitter.once(event, handler)
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Subscribed once to {event}: {handler_name}")

    def unsubscribe(self, event: str, handler: Callable[..., Any]) -> None:
        """Unsubscribe a handler from an event."""
        self._emitter.remove_listener(event, handler)
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Unsubscribed from {event}: {handler_name}")

    def publish(self, event: str, *args: Any, **kwargs: Any) -> None:
        """Publish an event to all subscribers.

        Events published while the bridge is inactive are dropped.

        Args:
            event: Event name to publish.
            *args: Positional arguments passed to handlers.
            **kwargs: Keyword arguments passed to handlers.
        """
        if not self._active:
            log_warn(f"ResolutionEventBridge not active, dropping event: {event}")
            return

        self._emitter.emit(event, *args, **kwargs)

    def listener_count(self, event: str) -> int:
        """Get the number of listeners for an event."""
        return len(self._emitter.listeners(event))

    @property
    def is_active(self) -> bool:
        """Check if the bridge is active."""
        return self._active

    @property
    def event_schema(self) -> dict[str, str]:
        """Get the event schema documentation."""
        return self._event_schema.copy()


__all__ = ["ResolutionEventBridge", "ResolutionEventNames"]

"""Capability Resolver - Priority-Ordered Unwrapping.

The CapabilityResolver recovers an object exhibiting a requested
capability from a handle that may be wrapped, delegated or proxied.

Resolution Contract (first success wins):
1. If the handle exhibits the target capability, return it unchanged
2. Otherwise try strategies in priority order (lower = first)
3. A terminal relation (protocol unwrap) is the answer
4. A followed relation (delegate, proxy target) restarts at step 1 from
   the inner target, and its outcome is the outcome of the call
5. Return None if no strategy finds a relation

Collaborator failures at any step count as "relation absent". Nothing
raised by a wrapper, delegation link, proxy introspector or event
listener reaches the caller.

Default Chain (when using .default()):
- Priority 10: ProtocolUnwrapStrategy - wrapper protocol produce()
- Priority 20: DelegationStrategy     - if config.delegation_enabled
- Priority 30: ProxyTargetStrategy    - if config.proxy_enabled

Usage:
    resolver = CapabilityResolver.default()
    data_source = resolver.unwrap(handle, DATA_SOURCE)

    # Ask the wrapper protocol for DATA_SOURCE, but only accept a POOLED result
    pool = resolver.unwrap(handle, DATA_SOURCE, POOLED)

    # Inspect the path taken
    trace = resolver.trace(handle, DATA_SOURCE)
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from .attempt import attempt
from .capabilities import Capability, CapabilityRegistry
from .config import ResolverConfig
from .events import ResolutionEventNames
from .exceptions import CollaboratorError, ConfigurationError, ResolutionCycleError
from .logging import configure_logging, log_debug, log_trace, log_warn
from .request import CapabilityRequest
from .strategies import (
    DelegationStrategy,
    ProtocolUnwrapStrategy,
    ProxyTargetStrategy,
    StrategyContext,
)
from .types import ResolutionHop, ResolutionTrace, StrategyFailure

if TYPE_CHECKING:
    from .events import ResolutionEventBridge
    from .protocols import ProxyIntrospector
    from .strategies import BaseStrategy, Relation

# Step name reported when the direct satisfaction check itself fails
DIRECT_CHECK = "direct"


class CapabilityResolver:
    """Priority-ordered chain of unwrap strategies.

    Holds no per-call state; a single resolver can serve many threads.
    Strategy registration is guarded by a lock, resolution reads an
    immutable snapshot of the chain.

    Attributes:
        config: The configuration the resolver was built with.
        registry: Capability registry used for every capability check.
        base_capability: Capability every followed inner target must
            exhibit, or None to follow any target.
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        *,
        registry: CapabilityRegistry | None = None,
        base_capability: Capability | None = None,
        events: ResolutionEventBridge | None = None,
    ) -> None:
        """Initialize a resolver with an empty strategy chain."""
        self._config = config or ResolverConfig()
        self._registry = registry or CapabilityRegistry.instance()
        self._base_capability = base_capability
        self._events = events
        self._strategies: tuple[BaseStrategy, ...] = ()
        self._lock = threading.RLock()

    @classmethod
    def default(
        cls,
        config: ResolverConfig | None = None,
        *,
        registry: CapabilityRegistry | None = None,
        base_capability: Capability | None = None,
        events: ResolutionEventBridge | None = None,
        proxy_introspector: ProxyIntrospector | None = None,
    ) -> CapabilityResolver:
        """Create a resolver with the built-in strategies.

        Optional strategies are registered according to the config flags,
        once, here.

        Returns:
            Resolver with ProtocolUnwrap, and Delegation / ProxyTarget when enabled.
        """
        config = config or ResolverConfig()
        resolver = cls(
            config,
            registry=registry,
            base_capability=base_capability,
            events=events,
        )
        resolver.add_strategy(ProtocolUnwrapStrategy())
        if config.delegation_enabled:
            resolver.add_strategy(DelegationStrategy())
        if config.proxy_enabled:
            resolver.add_strategy(ProxyTargetStrategy(proxy_introspector))
        return resolver

    @property
    def config(self) -> ResolverConfig:
        return self._config

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    @property
    def base_capability(self) -> Capability | None:
        return self._base_capability

    def add_strategy(self, strategy: BaseStrategy) -> CapabilityResolver:
        """Add a strategy to the chain.

        Strategies are kept sorted by priority. A strategy with the same
        name as an existing one replaces it.

        Returns:
            Self for method chaining.
        """
        with self._lock:
            strategies = [s for s in self._strategies if s.name != strategy.name]
            strategies.append(strategy)
            strategies.sort(key=lambda s: s.priority)
            self._strategies = tuple(strategies)
        return self

    def remove_strategy(self, name: str) -> BaseStrategy | None:
        """Remove a strategy by name.

        Returns:
            Removed strategy or None if not found.
        """
        with self._lock:
            removed = self.get_strategy(name)
            if removed is not None:
                self._strategies = tuple(s for s in self._strategies if s is not removed)
            return removed

    def get_strategy(self, name: str) -> BaseStrategy | None:
        """Get a strategy by name."""
        for strategy in self._strategies:
            if strategy.name == name:
                return strategy
        return None

    @property
    def strategy_names(self) -> list[str]:
        """Get names of strategies in priority order."""
        return [s.name for s in self._strategies]

    def list_strategies(self) -> list[tuple[str, int]]:
        """List strategies with their priorities, in priority order."""
        return [(s.name, s.priority) for s in self._strategies]

    def chain_info(self) -> list[dict[str, Any]]:
        """Get chain info for debugging."""
        return [
            {"name": s.name, "priority": s.priority, "type": type(s).__name__}
            for s in self._strategies
        ]

    def __len__(self) -> int:
        """Return number of strategies in chain."""
        return len(self._strategies)

    def unwrap(
        self,
        handle: Any,
        unwrap_capability: Capability,
        target_capability: Capability | None = None,
    ) -> Any | None:
        """Return an object exhibiting the target capability, or None.

        With two arguments the unwrap and target capabilities are the same,
        and the wrapper protocol is only consulted if that capability is an
        interface capability.

        Args:
            handle: The handle to resolve.
            unwrap_capability: Capability asked of the wrapper protocol.
            target_capability: Capability the result must exhibit. Defaults
                to ``unwrap_capability``.

        Returns:
            The resolved object or None.

        Raises:
            TypeError: If the capabilities are not Capability instances.
        """
        request = CapabilityRequest.of(unwrap_capability, target_capability)
        return self._walk(handle, request, None)

    def resolve(self, handle: Any, request: CapabilityRequest) -> Any | None:
        """Resolve a handle against a prepared request."""
        return self._walk(handle, request, None)

    def trace(
        self,
        handle: Any,
        unwrap_capability: Capability,
        target_capability: Capability | None = None,
    ) -> ResolutionTrace:
        """Resolve like ``unwrap`` and record the path taken.

        Returns:
            ResolutionTrace with the visited hops, recovered failures and result.
        """
        request = CapabilityRequest.of(unwrap_capability, target_capability)
        trace = ResolutionTrace(
            unwrap_capability=request.unwrap_capability.name,
            target_capability=request.target_capability.name,
        )
        trace.result = self._walk(handle, request, trace)
        return trace

    def _walk(
        self,
        handle: Any,
        request: CapabilityRequest,
        trace: ResolutionTrace | None,
    ) -> Any | None:
        strategies = self._strategies
        context = StrategyContext(self._registry, self._base_capability)
        max_depth = self._config.max_depth
        # Holds visited handles alive so their ids stay unique
        visited: dict[int, Any] = {}

        self._publish(ResolutionEventNames.RESOLUTION_STARTED, handle, request)

        result = None
        current = handle
        depth = 0
        while current is not None:
            if self._config.cycle_guard:
                if id(current) in visited:
                    self._on_cycle(current, depth, request, trace)
                    break
                visited[id(current)] = current

            handle_type = _type_name(current)
            hop = None
            if trace is not None:
                hop = ResolutionHop(depth=depth, handle_type=handle_type)
                trace.hops.append(hop)

            if self._exhibits(current, request.target_capability, depth, trace):
                result = current
                break

            relation, strategy = self._discover(
                strategies, current, request, context, depth, trace
            )
            if relation is None:
                break

            if hop is not None:
                hop.relation = relation.kind
                hop.strategy = strategy.name
            log_trace(
                f"CapabilityResolver: following {relation.kind.value} from {handle_type}",
                {"strategy": strategy.name, "depth": depth},
            )
            self._publish(ResolutionEventNames.RELATION_FOLLOWED, current, relation.kind, depth)

            if relation.terminal:
                if trace is not None:
                    trace.hops.append(
                        ResolutionHop(depth=depth + 1, handle_type=_type_name(relation.target))
                    )
                result = relation.target
                break

            if max_depth is not None and depth + 1 > max_depth:
                log_warn(
                    f"CapabilityResolver: gave up after {max_depth} hops",
                    {
                        "capability": request.target_capability.name,
                        "handle_type": _type_name(handle),
                    },
                )
                if trace is not None:
                    trace.depth_exceeded = True
                break

            current = relation.target
            depth += 1

        if result is None:
            log_debug(
                f"CapabilityResolver: no object exhibiting '{request.target_capability}' "
                f"reachable from {_type_name(handle)}"
            )
        self._publish(ResolutionEventNames.RESOLUTION_COMPLETED, request, result)
        return result

    def _exhibits(
        self,
        handle: Any,
        capability: Capability,
        depth: int,
        trace: ResolutionTrace | None,
    ) -> bool:
        outcome = attempt(self._registry.exhibits, handle, capability, description="exhibits")
        if outcome.failed:
            self._on_failure(DIRECT_CHECK, outcome.error, handle, depth, trace)
        return outcome.value is True

    def _discover(
        self,
        strategies: tuple[BaseStrategy, ...],
        handle: Any,
        request: CapabilityRequest,
        context: StrategyContext,
        depth: int,
        trace: ResolutionTrace | None,
    ) -> tuple[Relation | None, BaseStrategy | None]:
        for strategy in strategies:
            recorded = len(context.failures)
            outcome = attempt(
                strategy.discover,
                handle,
                request,
                context,
                description=f"{strategy.name}.discover",
            )
            context.record_failure(outcome.error)
            for error in context.failures[recorded:]:
                self._on_failure(strategy.name, error, handle, depth, trace)

            if outcome.is_present:
                return outcome.value, strategy
        return None, None

    def _on_failure(
        self,
        step: str,
        error: CollaboratorError,
        handle: Any,
        depth: int,
        trace: ResolutionTrace | None,
    ) -> None:
        log_debug(
            f"CapabilityResolver: step '{step}' skipped: {error.message}",
            {"strategy": step, "handle_type": _type_name(handle), "depth": depth},
        )
        if trace is not None:
            trace.failures.append(
                StrategyFailure(
                    depth=depth,
                    strategy=step,
                    handle_type=_type_name(handle),
                    error_type=error.metadata.get("cause_type", type(error).__name__),
                    message=error.message,
                )
            )
        self._publish(ResolutionEventNames.STRATEGY_FAILED, step, error)

    def _on_cycle(
        self,
        handle: Any,
        depth: int,
        request: CapabilityRequest,
        trace: ResolutionTrace | None,
    ) -> None:
        error = ResolutionCycleError(
            f"{_type_name(handle)} reached twice while resolving '{request.target_capability}'",
            metadata={"depth": depth, "handle_type": _type_name(handle)},
        )
        log_warn(f"CapabilityResolver: {error.message}", {"depth": depth})
        if trace is not None:
            trace.cycle_error = error
        self._publish(ResolutionEventNames.CYCLE_DETECTED, handle, depth, error)

    def _publish(self, event: str, *args: Any) -> None:
        events = self._events
        if events is None or not events.is_active:
            return
        try:
            events.publish(event, *args)
        except Exception as e:
            log_warn(
                f"CapabilityResolver: listener for '{event}' raised {type(e).__name__}: {e}"
            )


def _type_name(handle: Any) -> str:
    klass = type(handle)
    return f"{klass.__module__}.{klass.__qualname__}"


_default_resolver: CapabilityResolver | None = None
_default_lock = threading.Lock()


def get_default_resolver() -> CapabilityResolver:
    """Get the process-wide resolver used by ``unwrap_core.unwrap``.

    Built on first use from ``ResolverConfig.load()``; the config's
    log level is applied to the unwrap_core logger at that point. An
    invalid configuration is logged and replaced by the defaults.
    """
    global _default_resolver
    if _default_resolver is None:
        with _default_lock:
            if _default_resolver is None:
                try:
                    config = ResolverConfig.load()
                except ConfigurationError as e:
                    log_warn(
                        f"Invalid resolver configuration, using defaults: {e.message}",
                        {"error_type": type(e).__name__},
                    )
                    config = ResolverConfig()
                configure_logging(config.log_level)
                _default_resolver = CapabilityResolver.default(config)
    return _default_resolver


def reset_default_resolver() -> None:
    """Discard the process-wide resolver (primarily for tests)."""
    global _default_resolver
    with _default_lock:
        _default_resolver = None


def unwrap(
    handle: Any,
    unwrap_capability: Capability,
    target_capability: Capability | None = None,
) -> Any | None:
    """Return an object exhibiting the target capability, or None.

    Shortcut for ``get_default_resolver().unwrap(...)``. See
    ``CapabilityResolver.unwrap``.

    Example:
        >>> pool = unwrap(handle, DATA_SOURCE)
        >>> pool = unwrap(handle, DATA_SOURCE, POOLED)
    """
    return get_default_resolver().unwrap(handle, unwrap_capability, target_capability)


__all__ = [
    "CapabilityResolver",
    "get_default_resolver",
    "reset_default_resolver",
    "unwrap",
]

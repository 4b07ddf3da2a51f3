"""
unwrap-core

Recover an object exhibiting a requested capability from a handle that
may be wrapped, delegated or proxied through any number of layers.

Example:
    >>> from unwrap_core import Capability, provides, unwrap
    >>>
    >>> DATA_SOURCE = Capability("DataSource")
    >>>
    >>> @provides(DATA_SOURCE)
    ... class Pool:
    ...     pass
    >>>
    >>> class PoolDelegate:
    ...     def __init__(self, inner):
    ...         self._inner = inner
    ...     def inner_target(self):
    ...         return self._inner
    >>>
    >>> pool = Pool()
    >>> unwrap(PoolDelegate(pool), DATA_SOURCE) is pool
    True

    >>> # Build a resolver explicitly
    >>> from unwrap_core import CapabilityResolver, ResolverConfig
    >>> resolver = CapabilityResolver.default(ResolverConfig(delegation_enabled=False))
    >>> resolver.unwrap(PoolDelegate(pool), DATA_SOURCE) is None
    True
"""

from __future__ import annotations

from unwrap_core.attempt import Attempt, attempt, safe_produce
from unwrap_core.capabilities import Capability, CapabilityRegistry, provides
from unwrap_core.config import ResolverConfig
from unwrap_core.events import ResolutionEventBridge, ResolutionEventNames
from unwrap_core.exceptions import (
    CollaboratorError,
    ConfigurationError,
    ResolutionCycleError,
    UnwrapError,
)
from unwrap_core.logging import (
    configure_logging,
    log_debug,
    log_error,
    log_info,
    log_trace,
    log_warn,
)
from unwrap_core.protocols import (
    DelegationLink,
    ProxyIntrospector,
    WrappedAttributeIntrospector,
    WrapperProtocol,
)
from unwrap_core.request import CapabilityRequest
from unwrap_core.resolver import (
    CapabilityResolver,
    get_default_resolver,
    reset_default_resolver,
    unwrap,
)
from unwrap_core.strategies import (
    BaseStrategy,
    DelegationStrategy,
    ProtocolUnwrapStrategy,
    ProxyTargetStrategy,
    Relation,
    StrategyContext,
)
from unwrap_core.types import (
    LogContext,
    RelationKind,
    ResolutionHop,
    ResolutionTrace,
    StrategyFailure,
)

__version__ = "0.1.0"


def version() -> str:
    """Return the package version string."""
    return __version__


__all__ = [
    # Version
    "__version__",
    "version",
    # Resolution
    "unwrap",
    "CapabilityResolver",
    "get_default_resolver",
    "reset_default_resolver",
    "CapabilityRequest",
    # Capabilities
    "Capability",
    "CapabilityRegistry",
    "provides",
    # Collaborators
    "WrapperProtocol",
    "DelegationLink",
    "ProxyIntrospector",
    "WrappedAttributeIntrospector",
    # Strategies
    "BaseStrategy",
    "Relation",
    "StrategyContext",
    "ProtocolUnwrapStrategy",
    "DelegationStrategy",
    "ProxyTargetStrategy",
    # Best-effort calls
    "Attempt",
    "attempt",
    "safe_produce",
    # Configuration
    "ResolverConfig",
    # Events
    "ResolutionEventBridge",
    "ResolutionEventNames",
    # Types
    "RelationKind",
    "LogContext",
    "ResolutionHop",
    "ResolutionTrace",
    "StrategyFailure",
    # Exceptions
    "UnwrapError",
    "CollaboratorError",
    "ConfigurationError",
    "ResolutionCycleError",
    # Logging
    "configure_logging",
    "log_error",
    "log_warn",
    "log_info",
    "log_debug",
    "log_trace",
]

"""Proxy target strategy (priority 30).

Uses a ProxyIntrospector to recognize dynamic proxies and continue
resolution from the singleton target they stand in for. Registered only
when ``ResolverConfig.proxy_enabled`` is true.

Example:
    >>> strategy = ProxyTargetStrategy()  # __wrapped__ convention
    >>> strategy = ProxyTargetStrategy(MyFrameworkIntrospector())
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..attempt import attempt
from ..protocols import ProxyIntrospector, WrappedAttributeIntrospector
from ..types import RelationKind
from .base_strategy import BaseStrategy, Relation

if TYPE_CHECKING:
    from ..request import CapabilityRequest
    from .base_strategy import StrategyContext


class ProxyTargetStrategy(BaseStrategy):
    """Strategy for dynamic proxies.

    Priority 30 - checked last in the default chain.
    """

    def __init__(self, introspector: ProxyIntrospector | None = None) -> None:
        """Initialize the strategy.

        Args:
            introspector: Proxy introspector to consult. Defaults to
                WrappedAttributeIntrospector.
        """
        self._introspector = introspector or WrappedAttributeIntrospector()

    @property
    def name(self) -> str:
        """Return the strategy name."""
        return "proxy_target"

    @property
    def priority(self) -> int:
        """Return the strategy priority (30 = lowest)."""
        return 30

    @property
    def introspector(self) -> ProxyIntrospector:
        return self._introspector

    def discover(
        self,
        handle: Any,
        request: CapabilityRequest,
        context: StrategyContext,
    ) -> Relation | None:
        recognized = attempt(self._introspector.is_proxy, handle, description="is_proxy")
        if recognized.failed:
            context.record_failure(recognized.error)
            return None
        if not recognized.value:
            return None

        outcome = attempt(
            self._introspector.singleton_target, handle, description="singleton_target"
        )
        if outcome.failed:
            context.record_failure(outcome.error)
            return None

        target = outcome.value
        if not context.exhibits_base(target):
            return None
        return Relation(RelationKind.PROXY_TARGET, target)

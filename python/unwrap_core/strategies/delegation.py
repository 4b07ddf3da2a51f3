"""Delegation strategy (priority 20).

Follows handles implementing DelegationLink to their inner target. The
accessor must be defined by the handle itself, so forwarding proxies are
left to the proxy target strategy.
Registered only when ``ResolverConfig.delegation_enabled`` is true.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..attempt import attempt
from ..protocols import own_method
from ..types import RelationKind
from .base_strategy import BaseStrategy, Relation

if TYPE_CHECKING:
    from ..request import CapabilityRequest
    from .base_strategy import StrategyContext


class DelegationStrategy(BaseStrategy):
    """Strategy for delegation layers.

    Priority 20 - after protocol unwrap, before proxy introspection.

    A handle that is not a DelegationLink, or whose inner target is None
    or lacks the base capability, has no delegation relation.
    """

    @property
    def name(self) -> str:
        """Return the strategy name."""
        return "delegation"

    @property
    def priority(self) -> int:
        """Return the strategy priority."""
        return 20

    def discover(
        self,
        handle: Any,
        request: CapabilityRequest,
        context: StrategyContext,
    ) -> Relation | None:
        inner = self.inner_target(handle, context)
        if inner is None:
            return None
        return Relation(RelationKind.DELEGATE, inner)

    def inner_target(self, handle: Any, context: StrategyContext) -> Any | None:
        """Return the handle's delegate if it is a usable inner target."""
        lookup = attempt(own_method, handle, "inner_target", description="inner_target lookup")
        if lookup.failed:
            context.record_failure(lookup.error)
        if not lookup.is_present:
            return None

        outcome = attempt(lookup.value, description="inner_target")
        if outcome.failed:
            context.record_failure(outcome.error)
            return None

        target = outcome.value
        if not context.exhibits_base(target):
            return None
        return target

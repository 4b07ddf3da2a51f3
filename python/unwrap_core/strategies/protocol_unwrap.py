"""Protocol unwrap strategy (priority 10).

Asks the handle, through the wrapper protocol, to produce the unwrap
capability. The produced object is returned as-is when it exhibits the
target capability; it is never unwrapped further.

Example:
    >>> strategy = ProtocolUnwrapStrategy()
    >>> relation = strategy.discover(wrapper, CapabilityRequest.for_target(DATA_SOURCE), context)
    >>> relation.terminal
    True
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..attempt import safe_produce
from ..logging import log_debug
from ..types import RelationKind
from .base_strategy import BaseStrategy, Relation

if TYPE_CHECKING:
    from ..request import CapabilityRequest
    from .base_strategy import StrategyContext


class ProtocolUnwrapStrategy(BaseStrategy):
    """Strategy for handles implementing the wrapper protocol.

    Priority 10 - tried first, right after direct satisfaction.

    Only engaged when the unwrap capability is an interface capability and
    the target capability is the unwrap capability or extends it.
    """

    @property
    def name(self) -> str:
        """Return the strategy name."""
        return "protocol_unwrap"

    @property
    def priority(self) -> int:
        """Return the strategy priority (10 = highest)."""
        return 10

    def discover(
        self,
        handle: Any,
        request: CapabilityRequest,
        context: StrategyContext,
    ) -> Relation | None:
        if not request.protocol_eligible():
            return None

        outcome = safe_produce(handle, request.unwrap_capability)
        if outcome.failed:
            context.record_failure(outcome.error)
            return None
        if not outcome.is_present:
            return None

        produced = outcome.value
        if not context.registry.exhibits(produced, request.target_capability):
            log_debug(
                "ProtocolUnwrapStrategy: produced object does not exhibit target capability",
                {
                    "produced_type": type(produced).__qualname__,
                    "capability": request.target_capability.name,
                },
            )
            return None

        return Relation(RelationKind.PROTOCOL_UNWRAP, produced, terminal=True)

"""Abstract base class for unwrap strategies.

This module defines the contract every strategy implements. Strategies
are tried in priority order by the CapabilityResolver after the direct
satisfaction check fails.

Strategy Contract:
1. name - Human-readable identifier for logging/debugging
2. priority - Lower numbers = tried first (10 = protocol unwrap,
   20 = delegation, 30 = proxy target)
3. discover() - Return the relation this handle exposes, or None

A relation is either terminal (the target already satisfies the request
and is returned as-is) or followed (resolution continues from the target).

Example Implementation:
    class SessionStrategy(BaseStrategy):
        @property
        def name(self) -> str:
            return "session"

        @property
        def priority(self) -> int:
            return 25

        def discover(self, handle, request, context):
            if not isinstance(handle, Session):
                return None
            return Relation(RelationKind.DELEGATE, handle.connection)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..exceptions import CollaboratorError

if TYPE_CHECKING:
    from ..capabilities import Capability, CapabilityRegistry
    from ..request import CapabilityRequest
    from ..types import RelationKind


@dataclass(frozen=True)
class Relation:
    """A wrapping relation discovered on a handle.

    Attributes:
        kind: Which relation was found.
        target: The inner handle.
        terminal: True if the target is the answer, False if resolution
            continues from it.
    """

    kind: RelationKind
    target: Any
    terminal: bool = False


@dataclass
class StrategyContext:
    """Per-resolution context handed to strategies.

    Attributes:
        registry: Capability registry used for every capability check.
        base_capability: Capability inner targets must exhibit, or None to
            accept any target.
        failures: Collaborator failures recovered so far in this resolution.
    """

    registry: CapabilityRegistry
    base_capability: Capability | None = None
    failures: list[CollaboratorError] = field(default_factory=list)

    def exhibits_base(self, handle: Any) -> bool:
        """Check that an inner target has the same base capability."""
        if handle is None:
            return False
        if self.base_capability is None:
            return True
        return self.registry.exhibits(handle, self.base_capability)

    def record_failure(self, error: CollaboratorError | None) -> None:
        if error is not None:
            self.failures.append(error)


class BaseStrategy(ABC):
    """Abstract base class for unwrap strategies.

    Strategies must not raise for handles they do not recognize; a
    non-matching handle is expressed by returning None.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this strategy (for logging/debugging).

        Returns:
            The strategy name.
        """
        ...

    @property
    @abstractmethod
    def priority(self) -> int:
        """Resolution priority (lower = tried first).

        Returns:
            The priority value.
        """
        ...

    @abstractmethod
    def discover(
        self,
        handle: Any,
        request: CapabilityRequest,
        context: StrategyContext,
    ) -> Relation | None:
        """Find the relation this handle exposes.

        Args:
            handle: The handle being inspected.
            request: What the resolution is looking for.
            context: Registry and failure sink for this resolution.

        Returns:
            The discovered relation, or None if absent.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"
